"""Pure recurrence arithmetic - no I/O dependencies."""

from datetime import datetime, timedelta
from enum import Enum


class RecurrencePattern(str, Enum):
    """How often a recurring series repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


# Days per unit for the fixed-length patterns
_DAYS_PER_UNIT = {
    RecurrencePattern.DAILY: 1,
    RecurrencePattern.WEEKLY: 7,
    RecurrencePattern.BIWEEKLY: 14,
}


def _add_months(from_date: datetime, months: int) -> datetime:
    """
    Calendar month addition without day clamping.

    The day-of-month overflows into the following month when the target
    month is shorter: Jan 31 + 1 month = Mar 3 (Mar 2 in leap years).
    """
    month_index = from_date.month - 1 + months
    year = from_date.year + month_index // 12
    month = month_index % 12 + 1
    first_of_month = from_date.replace(year=year, month=month, day=1)
    return first_of_month + timedelta(days=from_date.day - 1)


def next_occurrence(pattern: str, interval: int, from_date: datetime) -> datetime:
    """
    Next occurrence after from_date for a pattern and interval.

    Unknown patterns and "custom" step by `interval` days. A non-positive
    interval is the caller's problem: it is not rejected here.
    Pure function - no I/O.
    """
    try:
        pattern = RecurrencePattern(pattern)
    except ValueError:
        pattern = RecurrencePattern.CUSTOM

    if pattern == RecurrencePattern.MONTHLY:
        return _add_months(from_date, interval)

    days = _DAYS_PER_UNIT.get(pattern, 1) * interval
    return from_date + timedelta(days=days)


def advance_past(pattern: str, interval: int, anchor: datetime, now: datetime) -> datetime:
    """
    Step forward from anchor until the date is strictly after now.

    Any number of missed cycles collapse into one future date.
    """
    if interval <= 0:
        raise ValueError(f"Recurrence interval must be positive, got {interval}")

    candidate = anchor
    while candidate <= now:
        candidate = next_occurrence(pattern, interval, candidate)
    return candidate


def within_horizon(candidate: datetime, now: datetime, days: int = 7) -> bool:
    """True if candidate is in the future and no more than `days` ahead."""
    return now < candidate <= now + timedelta(days=days)


def upcoming(pattern: str, interval: int, from_date: datetime, count: int) -> list[datetime]:
    """The next `count` occurrences after from_date."""
    dates = []
    current = from_date
    for _ in range(count):
        current = next_occurrence(pattern, interval, current)
        dates.append(current)
    return dates
