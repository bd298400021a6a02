"""Unit tests for the paging / sorting contract."""

import pytest

from trackrecord.core.validator import Validator
from trackrecord.models.workout import Workout
from trackrecord.repositories.filters import Filters, calculate_metadata, sort_safelist, validate_filters

SAFELIST = sort_safelist("id", "name")


def _errors(**kwargs) -> dict:
    v = Validator()
    validate_filters(v, Filters(sort_safelist=SAFELIST, **kwargs))
    return v.errors


@pytest.mark.unit
class TestValidateFilters:
    def test_defaults_are_valid(self):
        assert _errors() == {}

    def test_sort_safelist_includes_descending_variants(self):
        assert SAFELIST == ("id", "name", "-id", "-name")

    @pytest.mark.parametrize(
        "kwargs, field, message",
        [
            ({"page": 0}, "page", "must be greater than zero"),
            ({"page": 10_000_001}, "page", "must be a maximum of 10 million"),
            ({"page_size": 0}, "page_size", "must be greater than zero"),
            ({"page_size": 101}, "page_size", "must be a maximum of 100"),
            ({"sort": "password_hash"}, "sort", "invalid sort value"),
            ({"sort": "name; DROP TABLE users"}, "sort", "invalid sort value"),
        ],
    )
    def test_rejects_out_of_range_values(self, kwargs, field, message):
        assert _errors(**kwargs) == {field: message}

    def test_boundaries_are_accepted(self):
        assert _errors(page=10_000_000, page_size=100, sort="-name") == {}


@pytest.mark.unit
class TestFilters:
    def test_limit_and_offset(self):
        f = Filters(page=3, page_size=20)
        assert f.limit() == 20
        assert f.offset() == 40

    def test_sort_direction(self):
        assert Filters(sort="-name", sort_safelist=SAFELIST).sort_column() == "name"
        assert Filters(sort="-name", sort_safelist=SAFELIST).sort_descending()
        assert not Filters(sort="name", sort_safelist=SAFELIST).sort_descending()

    def test_unsafe_sort_never_becomes_a_column(self):
        with pytest.raises(ValueError):
            Filters(sort="password_hash", sort_safelist=SAFELIST).sort_column()

    def test_order_by_appends_identity_tiebreaker(self):
        f = Filters(sort="-name", sort_safelist=SAFELIST)
        clauses = f.order_by({"id": Workout.id, "name": Workout.name}, Workout.id)
        rendered = [str(c) for c in clauses]
        assert rendered == ["workouts.name DESC", "workouts.id ASC"]


@pytest.mark.unit
class TestCalculateMetadata:
    def test_no_records(self):
        metadata = calculate_metadata(0, 1, 20)
        assert metadata.total_records == 0
        assert metadata.last_page == 0
        assert metadata.first_page == 0

    def test_partial_last_page(self):
        metadata = calculate_metadata(45, 2, 20)
        assert metadata.model_dump() == {
            "current_page": 2,
            "page_size": 20,
            "first_page": 1,
            "last_page": 3,
            "total_pages": 3,
            "total_records": 45,
        }

    def test_exact_multiple(self):
        assert calculate_metadata(40, 1, 20).last_page == 2
