from datetime import date, datetime

import pytest

from src.hr_hub.hr_hub.common.datetime_utils import hours_between, month_bounds, sunday_week_bounds, week_bounds
from src.hr_hub.hr_hub.core.exceptions import ValidationError


def test_week_bounds_are_inclusive():
    assert week_bounds(date(2026, 3, 2)) == (date(2026, 3, 2), date(2026, 3, 8))


@pytest.mark.parametrize("day", [date(2026, 3, 1), date(2026, 3, 4), date(2026, 3, 7)])
def test_sunday_week_bounds(day):
    assert sunday_week_bounds(day) == (date(2026, 3, 1), date(2026, 3, 7))


def test_month_bounds_roll_over_year():
    assert month_bounds(2026, 12) == (date(2026, 12, 1), date(2027, 1, 1))
    with pytest.raises(ValidationError, match="Month must be between 1 and 12"):
        month_bounds(2026, 13)


def test_hours_between_never_negative():
    start, end = datetime(2026, 3, 2, 9, 0), datetime(2026, 3, 2, 17, 30)
    assert hours_between(start, end) == 8.5
    assert hours_between(end, start) == 0.0
    assert hours_between(start, None) == 0.0
