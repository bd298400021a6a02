"""Paging and sorting contract shared by every list query."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy import ColumnElement
from sqlalchemy.orm import InstrumentedAttribute

from trackrecord.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE, MAX_PAGE_SIZE
from trackrecord.core.validator import Validator, permitted_value
from trackrecord.schemas.common import Metadata


def sort_safelist(*columns: str) -> tuple[str, ...]:
    """Ascending and descending (``-col``) variants for each column."""
    return tuple(columns) + tuple(f"-{c}" for c in columns)


@dataclass
class Filters:
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    sort: str = "id"
    sort_safelist: tuple[str, ...] = ("id", "-id")

    def sort_column(self) -> str:
        # validate_filters should already have rejected this; never let it reach SQL
        if self.sort not in self.sort_safelist:
            raise ValueError(f"unsafe sort parameter: {self.sort!r}")
        return self.sort.lstrip("-")

    def sort_descending(self) -> bool:
        return self.sort.startswith("-")

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def order_by(
        self,
        columns: Mapping[str, InstrumentedAttribute | ColumnElement],
        tiebreaker: InstrumentedAttribute | ColumnElement,
    ) -> list[ColumnElement]:
        """Requested column first, then identity ascending so pages never overlap."""
        column = columns[self.sort_column()]
        primary = column.desc() if self.sort_descending() else column.asc()
        return [primary, tiebreaker.asc()]


def validate_filters(v: Validator, f: Filters) -> None:
    v.check(f.page > 0, "page", "must be greater than zero")
    v.check(f.page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(f.page_size > 0, "page_size", "must be greater than zero")
    v.check(f.page_size <= MAX_PAGE_SIZE, "page_size", f"must be a maximum of {MAX_PAGE_SIZE}")
    v.check(permitted_value(f.sort, *f.sort_safelist), "sort", "invalid sort value")


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata(current_page=page, page_size=page_size)
    last_page = math.ceil(total_records / page_size)
    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=last_page,
        total_pages=last_page,
        total_records=total_records,
    )
