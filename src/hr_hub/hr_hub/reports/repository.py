from __future__ import annotations

from typing import Protocol, Sequence

from .model import AttendanceReportRow, TimesheetReportRow
from .query import ReportFilter


class ReportRepository(Protocol):
    def attendance_rows(self, report_filter: ReportFilter) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError

    def timesheet_rows(self, report_filter: ReportFilter) -> Sequence[TimesheetReportRow]:
        raise NotImplementedError
