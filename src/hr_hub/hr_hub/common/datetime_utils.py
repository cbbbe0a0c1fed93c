from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from ..core.constants import DAYS_PER_WEEK
from ..core.exceptions import ValidationError


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now().replace(microsecond=0)


def week_bounds(week_start: date) -> Tuple[date, date]:
    """Inclusive (first, last) day of the week starting at week_start."""
    return week_start, week_start + timedelta(days=DAYS_PER_WEEK - 1)


def sunday_week_bounds(day: date) -> Tuple[date, date]:
    # date.weekday(): Monday=0 ... Sunday=6
    start = day - timedelta(days=(day.weekday() + 1) % DAYS_PER_WEEK)
    return week_bounds(start)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First day of the month and first day of the following month."""
    if not 1 <= int(month) <= 12:
        raise ValidationError("Month must be between 1 and 12")
    start = date(int(year), int(month), 1)
    if start.month == 12:
        return start, date(start.year + 1, 1, 1)
    return start, date(start.year, start.month + 1, 1)


def hours_between(start: Optional[datetime], end: Optional[datetime]) -> float:
    if not start or not end:
        return 0.0
    return max((end - start).total_seconds(), 0.0) / 3600
