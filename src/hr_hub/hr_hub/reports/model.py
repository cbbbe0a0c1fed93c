from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, TimesheetStatus


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read model for reporting: attendance joined with the employee."""

    user_id: int
    user_name: str
    email: str
    department: Optional[str]
    work_date: date
    status: AttendanceStatus
    check_in_at: Optional[datetime] = None
    check_out_at: Optional[datetime] = None


@dataclass(frozen=True)
class TimesheetReportRow:
    user_id: int
    user_name: str
    department: Optional[str]
    timesheet_id: int
    timesheet_status: TimesheetStatus
    project_id: int
    project_name: str
    work_date: date
    hours: float
    task_title: Optional[str] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]
