from __future__ import annotations

from datetime import date, datetime, time

from src.hr_hub.hr_hub.core.enums import AttendanceStatus, TimesheetStatus
from src.hr_hub.hr_hub.reports.model import AttendanceReportRow, TimesheetReportRow
from src.hr_hub.hr_hub.reports.query import ReportFilter
from src.hr_hub.hr_hub.reports.service import ReportService


class FakeReportRepo:
    def __init__(self, attendance=(), timesheets=()):
        self._attendance = list(attendance)
        self._timesheets = list(timesheets)
        self.last_filter = None

    def attendance_rows(self, report_filter):
        self.last_filter = report_filter
        return self._attendance

    def timesheet_rows(self, report_filter):
        self.last_filter = report_filter
        return self._timesheets


def _att(user_id, name, day, status=AttendanceStatus.PRESENT, check_in=None, check_out=None):
    return AttendanceReportRow(
        user_id=user_id,
        user_name=name,
        email=f"{name.lower()}@x.io",
        department="IT",
        work_date=day,
        status=status,
        check_in_at=datetime.combine(day, check_in) if check_in else None,
        check_out_at=datetime.combine(day, check_out) if check_out else None,
    )


def test_attendance_summary_counts():
    rows = [
        _att(1, "Bea", date(2026, 1, 5), check_in=time(8, 30), check_out=time(17, 30)),
        _att(1, "Bea", date(2026, 1, 6), check_in=time(9, 0), check_out=time(16, 0)),
        _att(1, "Bea", date(2026, 1, 7), status=AttendanceStatus.ABSENT),
        _att(2, "Ann", date(2026, 1, 5), check_in=time(9, 15)),
    ]
    svc = ReportService(FakeReportRepo(attendance=rows))

    report = svc.attendance_report(ReportFilter(start=date(2026, 1, 1), end=date(2026, 1, 31)))

    assert [s["user_name"] for s in report.summary] == ["Ann", "Bea"]
    ann, bea = report.summary
    assert bea["days_present"] == 2
    assert bea["days_absent"] == 1
    assert bea["late_arrivals"] == 1
    assert bea["early_checkouts"] == 1
    assert bea["total_hours"] == 16.0
    assert bea["total_worked"] == "16:00"
    assert len(bea["details"]) == 3

    # open day: late but no worked time, never an early checkout
    assert ann["late_arrivals"] == 1
    assert ann["early_checkouts"] == 0
    assert ann["total_worked"] == "00:00"
    assert len(report.rows) == 4


def test_filter_is_forwarded_unchanged():
    repo = FakeReportRepo()
    f = ReportFilter(user_id=5)

    ReportService(repo).attendance_report(f)

    assert repo.last_filter is f


def _ts(user_id, name, project_id, project_name, hours):
    return TimesheetReportRow(
        user_id=user_id,
        user_name=name,
        department=None,
        timesheet_id=user_id * 10,
        timesheet_status=TimesheetStatus.APPROVED,
        project_id=project_id,
        project_name=project_name,
        work_date=date(2026, 1, 5),
        hours=hours,
    )


def test_timesheet_summary_groups_by_project():
    rows = [
        _ts(1, "Bea", 2, "Zeta", 3.5),
        _ts(1, "Bea", 1, "Alpha", 2.0),
        _ts(1, "Bea", 2, "Zeta", 1.25),
        _ts(2, "Ann", 1, "Alpha", 8.0),
    ]

    report = ReportService(FakeReportRepo(timesheets=rows)).timesheet_report(ReportFilter())

    assert [s["user_name"] for s in report.summary] == ["Ann", "Bea"]
    bea = report.summary[1]
    assert bea["total_hours"] == 6.75
    assert [(p["project_name"], p["hours"], len(p["entries"])) for p in bea["projects"]] == [
        ("Alpha", 2.0, 1),
        ("Zeta", 4.75, 2),
    ]
    assert report.rows[0]["note"] == ""
