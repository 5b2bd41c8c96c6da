"""Unit tests for the due-date calculator."""

import calendar
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from models.obligation import Obligation
from services.due_date_calculator import (
    calculate_next_due,
    instance_in_month,
    monthly_equivalent,
    upcoming_due_dates,
)


def make(frequency="monthly", due_day=10, anchor=date(2024, 1, 1), active=True, amount="100"):
    return Obligation(
        user_id=1,
        name="Test",
        amount=Decimal(amount),
        frequency=frequency,
        due_day=due_day,
        anchor_date=anchor,
        is_active=active,
        id=1,
    )


@pytest.mark.unit
class TestClamping:

    def test_day_31_in_leap_february(self):
        ob = make("monthly", 31, date(2024, 1, 15))
        assert calculate_next_due(ob, date(2024, 2, 1)) == date(2024, 2, 29)

    def test_day_31_in_common_february(self):
        ob = make("monthly", 31, date(2023, 1, 15))
        assert calculate_next_due(ob, date(2023, 2, 1)) == date(2023, 2, 28)

    @pytest.mark.parametrize("due_day, year, month, expected", [
        (31, 2024, 4, date(2024, 4, 30)),
        (30, 2024, 2, date(2024, 2, 29)),
        (29, 2023, 2, date(2023, 2, 28)),
        (29, 2024, 2, date(2024, 2, 29)),
        (31, 2024, 12, date(2024, 12, 31)),
    ])
    def test_instance_in_month(self, due_day, year, month, expected):
        assert instance_in_month(year, month, due_day) == expected

    def test_never_overflows_into_next_month(self):
        ob = make("monthly", 31, date(2023, 1, 1))
        for year in (2023, 2024):
            for month in range(1, 13):
                result = calculate_next_due(ob, date(year, month, 1))
                assert (result.year, result.month) == (year, month)
                assert result.day == calendar.monthrange(year, month)[1]

    def test_quarterly_clamp_keeps_phase(self):
        ob = make("quarterly", 31, date(2024, 2, 1))
        assert upcoming_due_dates(ob, date(2024, 1, 1), 4) == [
            date(2024, 2, 29), date(2024, 5, 31), date(2024, 8, 31), date(2024, 11, 30),
        ]


@pytest.mark.unit
class TestCycles:

    def test_quarterly_phase_from_anchor_month(self):
        ob = make("quarterly", 10, date(2024, 3, 10))
        assert upcoming_due_dates(ob, date(2024, 1, 1), 3) == [
            date(2024, 3, 10), date(2024, 6, 10), date(2024, 9, 10),
        ]

    def test_half_yearly(self):
        ob = make("half_yearly", 5, date(2024, 2, 5))
        assert calculate_next_due(ob, date(2024, 3, 1)) == date(2024, 8, 5)
        assert calculate_next_due(ob, date(2024, 8, 6)) == date(2025, 2, 5)

    def test_yearly_same_month_as_anchor(self):
        ob = make("yearly", 20, date(2023, 5, 20))
        assert calculate_next_due(ob, date(2024, 6, 1)) == date(2025, 5, 20)

    def test_yearly_leap_day(self):
        ob = make("yearly", 29, date(2024, 2, 29))
        assert calculate_next_due(ob, date(2024, 3, 1)) == date(2025, 2, 28)
        assert calculate_next_due(ob, date(2027, 3, 1)) == date(2028, 2, 29)

    def test_monthly_skips_instance_before_anchor(self):
        ob = make("monthly", 10, date(2024, 1, 15))
        assert calculate_next_due(ob, date(2024, 1, 1)) == date(2024, 2, 10)

    def test_anchor_equal_to_from_date_on_instance(self):
        ob = make("monthly", 15, date(2024, 5, 15))
        assert calculate_next_due(ob, date(2024, 5, 15)) == date(2024, 5, 15)

    def test_from_date_far_before_anchor_returns_anchor_instance(self):
        ob = make("quarterly", 10, date(2024, 3, 10))
        assert calculate_next_due(ob, date(2020, 1, 1)) == date(2024, 3, 10)

    def test_old_anchor_does_not_hit_safety_cap(self):
        ob = make("quarterly", 10, date(1990, 1, 10))
        assert calculate_next_due(ob, date(2024, 1, 1)) == date(2024, 1, 10)

    def test_anchor_override_rephases(self):
        ob = make("quarterly", 10, date(2024, 3, 10))
        result = calculate_next_due(ob, date(2024, 4, 11), anchor_override=date(2024, 4, 10))
        assert result == date(2024, 7, 10)

    def test_result_never_before_floor(self):
        anchor = date(2024, 3, 10)
        ob = make("quarterly", 31, anchor)
        day = date(2023, 12, 1)
        while day < date(2025, 12, 31):
            result = calculate_next_due(ob, day)
            assert result >= max(anchor, day)
            day += timedelta(days=7)


@pytest.mark.unit
class TestNoDueDate:

    def test_one_time(self):
        assert calculate_next_due(make("one_time", None), date(2024, 1, 1)) is None

    def test_one_time_ignores_due_day(self):
        assert calculate_next_due(make("one_time", 10), date(2024, 1, 1)) is None

    def test_inactive(self):
        assert calculate_next_due(make(active=False), date(2024, 1, 1)) is None

    def test_missing_due_day(self):
        assert calculate_next_due(make("monthly", None), date(2024, 1, 1)) is None

    def test_unknown_frequency(self):
        assert calculate_next_due(make("weekly", 10), date(2024, 1, 1)) is None

    def test_out_of_range_due_day(self):
        assert calculate_next_due(make("monthly", 0), date(2024, 1, 1)) is None

    def test_safety_limit_logs_and_returns_none(self, caplog):
        ob = make("monthly", 10, date(2024, 1, 1))
        assert calculate_next_due(ob, date(2024, 5, 1), max_cycles=0) is None
        assert "SafetyLimitExceeded" in caplog.text

    def test_upcoming_for_one_time_is_empty(self):
        assert upcoming_due_dates(make("one_time", None), date(2024, 1, 1), 3) == []


@pytest.mark.unit
class TestUtcNormalization:

    def test_aware_datetime_converted_to_utc_day(self):
        ob = make("monthly", 10, date(2024, 1, 1))
        # 22:00 on the 9th at UTC-5 is already the 10th in UTC
        evening = datetime(2024, 3, 9, 22, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert calculate_next_due(ob, evening) == date(2024, 3, 10)

    def test_string_dates_accepted(self):
        ob = make("monthly", 31, "2024-01-15")
        assert calculate_next_due(ob, "2024-02-01") == date(2024, 2, 29)


@pytest.mark.unit
def test_monthly_equivalent():
    assert monthly_equivalent(make("quarterly", amount="300")) == Decimal("100")
    assert monthly_equivalent(make("yearly", amount="1200")) == Decimal("100")
    assert monthly_equivalent(make("one_time", None, amount="500")) == Decimal("0")
