"""Tests for report date range resolution."""

import sys
from datetime import date, datetime

import pytest

from cashbox.errors import MissingDateRangeError, ValidationError
from cashbox.services.date_range import parse_bound, resolve_range, trailing_window


class TestParseBound:
    """Test parse_bound."""

    def test_bare_dates_cover_whole_day(self):
        assert parse_bound("2024-01-31") == datetime(2024, 1, 31, 0, 0, 0)
        assert parse_bound("2024-01-31", is_end=True) == datetime(2024, 1, 31, 23, 59, 59)
        assert parse_bound(date(2024, 1, 31), is_end=True) == datetime(
            2024, 1, 31, 23, 59, 59
        )

    @pytest.mark.skipif(
        sys.version_info < (3, 11), reason="basic ISO dates need Python 3.11"
    )
    def test_basic_format_date_covers_whole_day(self):
        assert parse_bound("20240131") == datetime(2024, 1, 31, 0, 0, 0)
        assert parse_bound("20240131", is_end=True) == datetime(
            2024, 1, 31, 23, 59, 59
        )

    def test_datetimes_are_kept(self):
        assert parse_bound("2024-01-31 14:00:00", is_end=True) == datetime(
            2024, 1, 31, 14
        )
        assert parse_bound(datetime(2024, 1, 31, 14)) == datetime(2024, 1, 31, 14)

    def test_blank_is_absent(self):
        assert parse_bound(None) is None
        assert parse_bound("   ") is None

    @pytest.mark.parametrize("value", ["31/01/2024", "2024-13-01", 20240131])
    def test_invalid_values(self, value):
        with pytest.raises(ValidationError):
            parse_bound(value)


class TestResolveRange:
    """Test resolve_range and trailing_window."""

    def test_both_bounds(self):
        window = resolve_range("2024-01-01", "2024-01-31")
        assert window.start == datetime(2024, 1, 1)
        assert window.end == datetime(2024, 1, 31, 23, 59, 59)
        assert window.label == "2024-01-01 to 2024-01-31"

    def test_same_day_range(self):
        window = resolve_range("2024-01-01", "2024-01-01")
        assert window.start < window.end

    def test_optional_range_absent(self):
        assert resolve_range(None, None, required=False) is None

    def test_missing_bounds(self):
        with pytest.raises(MissingDateRangeError):
            resolve_range(None, None)
        with pytest.raises(MissingDateRangeError):
            resolve_range("2024-01-01", None, required=False)

    def test_start_after_end(self):
        with pytest.raises(ValidationError):
            resolve_range("2024-02-01", "2024-01-31")

    def test_trailing_window(self):
        window = trailing_window(30, today=date(2024, 3, 31))
        assert window.start == datetime(2024, 3, 1)
        assert window.end == datetime(2024, 3, 31, 23, 59, 59)
