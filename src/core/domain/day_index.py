"""
Day Index - calendar dates as whole days since the Bitcoin genesis block.

All model inputs are expressed as day offsets from GENESIS_DATE. Offsets are
computed on calendar dates only, so wall-clock time and DST transitions can
never shift a result by one day.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Final, Union

# Day 0 of the model: date of the genesis block
GENESIS_DATE: Final[date] = date(2009, 1, 3)

MS_PER_DAY: Final[int] = 86_400_000

DateLike = Union[date, datetime, int, float]


def to_calendar_date(value: DateLike) -> date:
    """
    Reduce a date-like value to a calendar date.

    Args:
        value: date, datetime (its own calendar date is used, whatever the
            time of day) or a Unix timestamp in milliseconds (UTC)

    Returns:
        Calendar date

    Raises:
        TypeError: if value is not date-like
    """
    # datetime is a subclass of date, check it first
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected date, datetime or epoch ms, got {type(value).__name__}")
    return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc).date()


def days_since_epoch(value: DateLike) -> int:
    """
    Whole days between GENESIS_DATE and value.

    Negative for dates before genesis; callers that take a logarithm clamp to 1.

    Examples:
        >>> days_since_epoch(date(2009, 1, 3))
        0
        >>> days_since_epoch(datetime(2009, 1, 4, 23, 59))
        1
        >>> days_since_epoch(date(2024, 1, 1))
        5476
    """
    return (to_calendar_date(value) - GENESIS_DATE).days


def year_start_days(year: int) -> int:
    """Day offset of January 1st of year."""
    return days_since_epoch(date(year, 1, 1))


def date_from_days(days: int) -> date:
    """Inverse of days_since_epoch."""
    return GENESIS_DATE + timedelta(days=days)
