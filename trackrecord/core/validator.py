"""Field-level input validation.

Checks accumulate into ``Validator.errors`` instead of raising, so one
response can report every problem in a request body or query string.
"""

from __future__ import annotations

import re
from typing import Any

EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


class Validator:
    """Collects field -> message failures. The first message recorded for a field wins."""

    def __init__(self) -> None:
        self.errors: dict[str, str] = {}

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        if key not in self.errors:
            self.errors[key] = message

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)


def permitted_value(value: Any, *permitted: Any) -> bool:
    return value in permitted


def matches(value: str, rx: re.Pattern[str]) -> bool:
    return rx.match(value) is not None
