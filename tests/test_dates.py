"""Tests for UTC date helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest

from utils.dates import format_date, parse_date, to_utc_date


@pytest.mark.unit
class TestToUtcDate:

    def test_plain_date(self):
        assert to_utc_date(date(2024, 2, 29)) == date(2024, 2, 29)

    def test_naive_datetime_is_utc(self):
        assert to_utc_date(datetime(2024, 3, 10, 23, 59)) == date(2024, 3, 10)

    def test_aware_datetime_shifts_to_utc(self):
        tokyo = timezone(timedelta(hours=9))
        assert to_utc_date(datetime(2024, 3, 10, 5, 0, tzinfo=tokyo)) == date(2024, 3, 9)

    def test_iso_strings(self):
        assert to_utc_date("2024-03-10") == date(2024, 3, 10)
        assert to_utc_date("2024-03-10T22:30:00-03:00") == date(2024, 3, 11)
        assert to_utc_date("2024-03-10T10:00:00Z") == date(2024, 3, 10)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            to_utc_date("10/03/2024")
        with pytest.raises(TypeError):
            to_utc_date(20240310)


@pytest.mark.unit
def test_format_and_parse():
    assert format_date(date(2024, 1, 5)) == "2024-01-05"
    assert format_date(None) is None
    assert parse_date("") is None
    assert parse_date("2024-01-05") == date(2024, 1, 5)
