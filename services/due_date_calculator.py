"""
services/due_date_calculator.py
-------------------------------
Pure due-date arithmetic for recurring obligations.

A schedule is phased from the month of its anchor date: a quarterly
obligation anchored in March falls in March, June, September and December.
Inside a target month the obligation's ``due_day`` is clamped to the last
day of that month, so day 31 becomes 30 in April and 28/29 in February.

All values are UTC calendar days (see ``utils.dates``).
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from config import SCHEDULE_SAFETY_LIMIT
from models.obligation import (
    HALF_YEARLY,
    MONTHLY,
    QUARTERLY,
    YEARLY,
    Obligation,
)
from utils.dates import DateLike, to_utc_date
from utils.logger import get_logger

logger = get_logger(__name__)

# Months per cycle; frequencies missing here never produce a due date.
CYCLE_MONTHS = {
    MONTHLY: 1,
    QUARTERLY: 3,
    HALF_YEARLY: 6,
    YEARLY: 12,
}


def _months_between(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)


def instance_in_month(year: int, month: int, due_day: int) -> date:
    """The due date inside a given month, with ``due_day`` clamped."""
    return date(year, month, 1) + relativedelta(day=due_day)


def calculate_next_due(
    obligation: Obligation,
    from_date: DateLike,
    anchor_override: Optional[DateLike] = None,
    max_cycles: int = SCHEDULE_SAFETY_LIMIT,
) -> Optional[date]:
    """
    Compute the next occurrence of a recurring obligation.

    Args:
        obligation: The obligation whose frequency, due day and anchor apply.
        from_date: Lower bound; the result is never earlier than this day.
        anchor_override: Resume the cycle from this date instead of the
            obligation's own anchor (e.g. the instance that was just paid).
        max_cycles: Safety cap on the number of cycles examined.

    Returns:
        The earliest clamped cycle date on or after
        ``max(anchor, from_date)``, or None when the obligation is one-time,
        inactive, has no due day, has an unknown frequency, or the safety
        cap was hit.
    """
    if not obligation.is_active or obligation.due_day is None:
        return None

    step = CYCLE_MONTHS.get(obligation.frequency)
    if step is None:
        return None

    due_day = obligation.due_day
    if not 1 <= due_day <= 31:
        logger.warning(
            f"Obligation #{obligation.id} has out-of-range due day {due_day}; "
            f"no due date computed"
        )
        return None

    anchor = to_utc_date(anchor_override if anchor_override is not None else obligation.anchor_date)
    floor = max(anchor, to_utc_date(from_date))
    cycle_origin = date(anchor.year, anchor.month, 1)

    # Start at the last cycle that begins in or before the floor's month.
    first_cycle = _months_between(cycle_origin, floor) // step

    for cycle in range(first_cycle, first_cycle + max_cycles):
        month_start = cycle_origin + relativedelta(months=cycle * step)
        candidate = instance_in_month(month_start.year, month_start.month, due_day)
        if candidate >= floor:
            return candidate

    logger.error(
        f"SafetyLimitExceeded: no due date for obligation #{obligation.id} "
        f"({obligation.frequency}, day {due_day}) within {max_cycles} cycles "
        f"of {anchor} (floor {floor})"
    )
    return None


def upcoming_due_dates(
    obligation: Obligation,
    from_date: DateLike,
    count: int,
    anchor_override: Optional[DateLike] = None,
) -> list[date]:
    """
    List the next ``count`` due dates on or after ``from_date``.

    Returns an empty list for obligations that never come due.
    """
    dates: list[date] = []
    cursor = to_utc_date(from_date)
    while len(dates) < count:
        nxt = calculate_next_due(obligation, cursor, anchor_override)
        if nxt is None:
            break
        dates.append(nxt)
        cursor = nxt + timedelta(days=1)
    return dates


def monthly_equivalent(obligation: Obligation) -> Decimal:
    """Amount normalized to one month (0 for one-time obligations)."""
    step = CYCLE_MONTHS.get(obligation.frequency)
    if step is None:
        return Decimal("0")
    return Decimal(obligation.amount) / step
