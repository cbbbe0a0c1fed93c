from __future__ import annotations

from typing import Optional

from ..core.constants import FULL_DAY_HOURS, LATE_ARRIVAL_CUTOFF
from ..core.enums import AttendanceStatus
from .calculator.base import WorkedTimeCalculator
from .calculator.standard_calculator import StandardWorkedTimeCalculator
from .model import AttendanceReportRow, ReportData
from .query import ReportFilter
from .repository import ReportRepository


def _hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _is_late(row: AttendanceReportRow) -> bool:
    return (
        row.status == AttendanceStatus.PRESENT
        and row.check_in_at is not None
        and row.check_in_at.time() >= LATE_ARRIVAL_CUTOFF
    )


class ReportService:
    def __init__(self, reports: ReportRepository, *, calculator: Optional[WorkedTimeCalculator] = None):
        self._reports = reports
        self._calculator = calculator or StandardWorkedTimeCalculator()

    def attendance_report(self, report_filter: ReportFilter) -> ReportData:
        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in self._reports.attendance_rows(report_filter):
            minutes = self._calculator.worked_minutes(r)
            late = _is_late(r)
            complete = r.check_in_at is not None and r.check_out_at is not None
            early = complete and minutes < FULL_DAY_HOURS * 60

            detail = {
                "user_id": r.user_id,
                "user_name": r.user_name,
                "work_date": r.work_date.strftime("%Y-%m-%d"),
                "status": r.status.value,
                "check_in": r.check_in_at.strftime("%H:%M") if r.check_in_at else None,
                "check_out": r.check_out_at.strftime("%H:%M") if r.check_out_at else None,
                "worked_hours": _hhmm(minutes),
                "late": late,
                "early_checkout": early,
            }
            out_rows.append(detail)

            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "user_name": r.user_name,
                    "email": r.email,
                    "department": r.department,
                    "days_present": 0,
                    "days_absent": 0,
                    "late_arrivals": 0,
                    "early_checkouts": 0,
                    "total_minutes": 0,
                    "details": [],
                }
                summary_map[r.user_id] = s

            if r.status == AttendanceStatus.PRESENT:
                s["days_present"] += 1
            elif r.status == AttendanceStatus.ABSENT:
                s["days_absent"] += 1
            s["late_arrivals"] += int(late)
            s["early_checkouts"] += int(early)
            s["total_minutes"] += minutes
            s["details"].append(detail)

        summary = []
        for s in summary_map.values():
            total_minutes = int(s.pop("total_minutes"))
            s["total_hours"] = round(total_minutes / 60, 2)
            s["total_worked"] = _hhmm(total_minutes)
            summary.append(s)

        summary.sort(key=lambda x: x["user_name"])
        return ReportData(rows=out_rows, summary=summary)

    def timesheet_report(self, report_filter: ReportFilter) -> ReportData:
        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in self._reports.timesheet_rows(report_filter):
            detail = {
                "timesheet_id": r.timesheet_id,
                "timesheet_status": r.timesheet_status.value,
                "user_id": r.user_id,
                "user_name": r.user_name,
                "project_id": r.project_id,
                "project_name": r.project_name,
                "task_title": r.task_title,
                "work_date": r.work_date.strftime("%Y-%m-%d"),
                "hours": r.hours,
                "note": r.note or "",
            }
            out_rows.append(detail)

            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "user_name": r.user_name,
                    "department": r.department,
                    "total_hours": 0.0,
                    "projects": {},
                }
                summary_map[r.user_id] = s

            p = s["projects"].get(r.project_id)
            if not p:
                p = {"project_id": r.project_id, "project_name": r.project_name, "hours": 0.0, "entries": []}
                s["projects"][r.project_id] = p

            s["total_hours"] += r.hours
            p["hours"] += r.hours
            p["entries"].append(detail)

        summary = []
        for s in summary_map.values():
            projects = sorted(s["projects"].values(), key=lambda x: x["project_name"])
            for p in projects:
                p["hours"] = round(p["hours"], 2)
            s["projects"] = projects
            s["total_hours"] = round(s["total_hours"], 2)
            summary.append(s)

        summary.sort(key=lambda x: x["total_hours"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)
