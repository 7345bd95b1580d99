"""
Calendar Walker

Day-by-day iteration over inclusive date ranges.
"""

from datetime import date, timedelta
from typing import Iterator


# Monday = 0 ... Sunday = 6
WEEKEND_DAYS = (5, 6)


def is_weekend(day: date) -> bool:
    """Check if a date falls on Saturday or Sunday."""
    return day.weekday() in WEEKEND_DAYS


def each_day(start: date, end: date) -> Iterator[date]:
    """
    Yield every calendar date from ``start`` to ``end`` inclusive.

    Yields nothing when ``end`` is before ``start``. Each call returns a
    fresh generator, so the walk can be restarted.
    """
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def each_weekday(start: date, end: date) -> Iterator[date]:
    """Yield the non-weekend dates of a range."""
    return (d for d in each_day(start, end) if not is_weekend(d))


def count_weekdays(start: date, end: date) -> int:
    """Number of non-weekend days in a range, ignoring holidays."""
    return sum(1 for _ in each_weekday(start, end))


def expand_days(start: date, end: date, exclude_weekends: bool = False) -> list[date]:
    """
    Break a multi-day range into the individual dates a holiday covers.

    Weekend dates are kept unless ``exclude_weekends`` is set.
    """
    return [
        d for d in each_day(start, end)
        if not (exclude_weekends and is_weekend(d))
    ]
