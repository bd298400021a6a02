"""Request parsing and error helpers shared by the endpoint modules."""

from __future__ import annotations

from collections.abc import Mapping

from fastapi import HTTPException

from trackrecord.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_DB_INT
from trackrecord.core.validator import Validator
from trackrecord.repositories.filters import Filters, validate_filters

NOT_FOUND_MESSAGE = "the requested resource could not be found"


def not_found() -> HTTPException:
    return HTTPException(status_code=404, detail=NOT_FOUND_MESSAGE)


def failed_validation(errors: dict[str, str]) -> HTTPException:
    return HTTPException(status_code=422, detail=errors)


def parse_int(raw: str) -> int | None:
    """Optional sign then ASCII digits only; anything else (spaces, ``_``, other scripts) is None."""
    digits = raw[1:] if raw[:1] in ("+", "-") else raw
    if not (digits.isascii() and digits.isdigit()):
        return None
    return int(raw)


def read_id_param(raw: str) -> int:
    """Path ids that are not integers in 1..MAX_DB_INT are simply not found."""
    value = parse_int(raw)
    if value is None or not 1 <= value <= MAX_DB_INT:
        raise not_found()
    return value


def read_string(qs: Mapping[str, str], key: str, default: str) -> str:
    return qs.get(key) or default


def read_int(qs: Mapping[str, str], key: str, default: int, v: Validator) -> int:
    raw = qs.get(key)
    if not raw:
        return default
    value = parse_int(raw)
    if value is None:
        v.add_error(key, "must be an integer value")
        return default
    return value


def read_filters(
    qs: Mapping[str, str], v: Validator, default_sort: str, safelist: tuple[str, ...]
) -> Filters:
    """page / page_size / sort from the query string, validated against ``safelist``."""
    filters = Filters(
        page=read_int(qs, "page", DEFAULT_PAGE, v),
        page_size=read_int(qs, "page_size", DEFAULT_PAGE_SIZE, v),
        sort=read_string(qs, "sort", default_sort),
        sort_safelist=safelist,
    )
    validate_filters(v, filters)
    return filters
