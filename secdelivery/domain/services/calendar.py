"""
Working Calendar - Weekend/holiday aware date arithmetic.

Two deliberately different notions of a working day are kept:
- Scheduling (is_working_day / add_working_days) skips weekends AND holidays
- Capacity checks (working_days_between) skip weekends only
"""
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Optional

from ..exceptions import InvariantViolationError


def as_date(value) -> date:
    """Normalise a datetime (or date) to a plain date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def normalize_holidays(holidays: Optional[Iterable]) -> frozenset:
    """Holiday set keyed by ISO date string ('2025-12-25')."""
    if not holidays:
        return frozenset()
    return frozenset(
        h if isinstance(h, str) else as_date(h).isoformat()
        for h in holidays
    )


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def is_working_day(day: date, holidays: Optional[Iterable] = None) -> bool:
    """Check if a date is a working day (not weekend, not public holiday)."""
    day = as_date(day)
    if is_weekend(day):
        return False
    if holidays and (day.isoformat() in holidays or day in holidays):
        return False
    return True


def add_working_days(from_date: date, n: int, holidays: Optional[Iterable] = None) -> date:
    """
    Date of the nth working day strictly after from_date.

    Args:
        from_date: Day the count starts after (not itself counted)
        n: Number of working days to advance, must be positive
        holidays: ISO date strings (or dates) to skip

    Returns:
        The nth working day
    """
    if n <= 0:
        raise InvariantViolationError(
            "positive_working_day_advance", expected="n >= 1", actual=f"n = {n}"
        )
    current = as_date(from_date)
    counted = 0
    while counted < n:
        current += timedelta(days=1)
        if is_working_day(current, holidays):
            counted += 1
    return current


def iter_weekdays(start: date, end: date) -> Iterator[date]:
    """Yield every Monday-Friday date in [start, end]."""
    current, end = as_date(start), as_date(end)
    while current <= end:
        if not is_weekend(current):
            yield current
        current += timedelta(days=1)


def working_days_between(start: date, end: date) -> int:
    """
    Count weekdays between start and end (inclusive).

    Public holidays are NOT excluded here; this coarser count is only used
    for capacity-vs-deadline checks. Returns 0 when end < start.
    """
    return sum(1 for _ in iter_weekdays(start, end))
