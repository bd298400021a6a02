"""Application constants."""

# Every store call (and every transaction as a whole) must finish within this
QUERY_TIMEOUT_SECONDS = 3

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100

# Progress report
REPORT_DEFAULT_DAYS = 30
REPORT_PAGE_SIZE = 100

# Rate limiter housekeeping
LIMITER_IDLE_TIMEOUT_SECONDS = 3 * 60
LIMITER_SWEEP_INTERVAL_SECONDS = 60

# Column limits: ids and counts are int4, weights are NUMERIC(8, 2)
MAX_DB_INT = 2**31 - 1
MAX_WEIGHT = 1_000_000
