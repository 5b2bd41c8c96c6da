"""
utils/dates.py
--------------
UTC calendar-day helpers.

Every schedule computation works on plain ``date`` objects that represent
a UTC calendar day. Anything carrying a time of day is converted to UTC
first and then truncated, so a local daylight-saving shift can never move
a due date by one day.
"""

from datetime import date, datetime, timezone
from typing import Optional, Union

DATE_FMT = "%Y-%m-%d"

DateLike = Union[date, datetime, str]


def utc_today() -> date:
    """Current calendar day in UTC."""
    return datetime.now(timezone.utc).date()


def to_utc_date(value: DateLike) -> date:
    """
    Normalize a date-like value to a UTC calendar day.

    Accepts:
        - ``date``: returned unchanged.
        - ``datetime``: aware values are converted to UTC, naive values
          are assumed to already be UTC; the time of day is dropped.
        - ``str``: ``YYYY-MM-DD`` (a longer ISO timestamp is parsed
          as a datetime).

    Raises:
        ValueError: If a string cannot be parsed.
        TypeError: For any other type.
    """
    # datetime is a subclass of date, so it must be checked first
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return datetime.strptime(text, DATE_FMT).date()
        return to_utc_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
    raise TypeError(f"Cannot convert {type(value).__name__} to a date")


def format_date(value: Optional[date]) -> Optional[str]:
    """Render a date as ``YYYY-MM-DD`` (None stays None)."""
    if value is None:
        return None
    return to_utc_date(value).strftime(DATE_FMT)


def parse_date(value: Optional[DateLike]) -> Optional[date]:
    """Inverse of :func:`format_date`; empty values become None."""
    if value is None or value == "":
        return None
    return to_utc_date(value)
