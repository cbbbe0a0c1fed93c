from datetime import date

import pytest

from src.hr_hub.hr_hub.core.enums import Role
from src.hr_hub.hr_hub.core.exceptions import ValidationError
from src.hr_hub.hr_hub.reports.query import ReportFilter


def test_empty_filter_matches_everything():
    assert ReportFilter().where_clause(date_column="a.work_date") == ("1=1", ())


def test_values_travel_only_as_params():
    f = ReportFilter(
        start=date(2026, 1, 1),
        end=date(2026, 1, 31),
        user_id=7,
        role=Role.EMPLOYEE,
        department="x' OR '1'='1",
    )

    sql, params = f.where_clause(date_column="a.work_date")

    assert sql == (
        "a.work_date >= %s AND a.work_date <= %s AND ua.id = %s AND ua.role = %s AND ua.department = %s"
    )
    assert params == (date(2026, 1, 1), date(2026, 1, 31), 7, "employee", "x' OR '1'='1")
    assert "OR" not in sql


def test_custom_user_alias():
    sql, _ = ReportFilter(user_id=3).where_clause(date_column="te.work_date", user_alias="u")
    assert sql == "u.id = %s"


def test_inverted_range_is_rejected():
    with pytest.raises(ValidationError):
        ReportFilter(start=date(2026, 2, 1), end=date(2026, 1, 1))
