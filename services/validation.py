"""
services/validation.py
----------------------
Input checks applied before obligations and payments are stored.
The scheduling core assumes these have already passed.
"""

from decimal import Decimal, InvalidOperation
from typing import Optional

from models.obligation import FREQUENCIES, ONE_TIME
from models.payment import STATUSES
from utils.errors import (
    InvalidAmountError,
    InvalidDueDayError,
    InvalidFrequencyError,
    InvalidStatusError,
    MissingDueDayError,
    ValidationError,
)


def validate_amount(amount) -> Decimal:
    """Coerce to Decimal and require a positive value."""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(amount) from None
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(amount)
    return value


def validate_schedule(frequency: str, due_day: Optional[int]) -> Optional[int]:
    """
    Check a frequency / due-day pair.

    Returns:
        The due day to store (None for one-time obligations).
    """
    if frequency not in FREQUENCIES:
        raise InvalidFrequencyError(frequency)
    if frequency == ONE_TIME:
        return None
    if due_day is None:
        raise MissingDueDayError(frequency)
    if isinstance(due_day, bool) or not isinstance(due_day, int) or not 1 <= due_day <= 31:
        raise InvalidDueDayError(due_day)
    return due_day


def validate_status(status: str) -> str:
    if status not in STATUSES:
        raise InvalidStatusError(status)
    return status


def validate_reminder_days(days) -> int:
    if isinstance(days, bool) or not isinstance(days, int) or not 0 <= days <= 30:
        raise ValidationError(f"Reminder days must be between 0 and 30, got {days!r}")
    return days
