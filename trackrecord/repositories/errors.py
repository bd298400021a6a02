"""Errors the data layer raises on purpose. Anything else is an infrastructure failure."""


class RecordNotFoundError(Exception):
    """No row matched the identity (and, for owned aggregates, the owner)."""

    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)


class DuplicateEmailError(Exception):
    def __init__(self, message: str = "duplicate email") -> None:
        super().__init__(message)
