from __future__ import annotations

from typing import Sequence

from ..core.enums import AttendanceStatus, TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceReportRow, TimesheetReportRow
from .query import ReportFilter
from .repository import ReportRepository


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def attendance_rows(self, report_filter: ReportFilter) -> Sequence[AttendanceReportRow]:
        where, params = report_filter.where_clause(date_column="a.work_date")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.user_id, ua.name AS user_name, ua.email, ua.department,
                       a.work_date, a.status, a.check_in_at, a.check_out_at
                FROM attendance a
                JOIN user_account ua ON ua.id = a.user_id
                WHERE {where}
                ORDER BY ua.name ASC, a.work_date DESC
                """,
                params,
            )
            return [
                AttendanceReportRow(
                    user_id=int(r["user_id"]),
                    user_name=r["user_name"],
                    email=r["email"],
                    department=r.get("department"),
                    work_date=r["work_date"],
                    status=AttendanceStatus(r["status"]),
                    check_in_at=r.get("check_in_at"),
                    check_out_at=r.get("check_out_at"),
                )
                for r in fetchall(cur)
            ]

    def timesheet_rows(self, report_filter: ReportFilter) -> Sequence[TimesheetReportRow]:
        where, params = report_filter.where_clause(date_column="te.work_date")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ts.id AS timesheet_id, ts.status AS timesheet_status, ts.user_id,
                       ua.name AS user_name, ua.department,
                       te.project_id, p.name AS project_name, t.title AS task_title,
                       te.work_date, te.hours, te.note
                FROM timesheet ts
                JOIN user_account ua ON ua.id = ts.user_id
                JOIN timesheet_entry te ON te.timesheet_id = ts.id
                JOIN project p ON p.id = te.project_id
                LEFT JOIN task t ON t.id = te.task_id
                WHERE {where}
                ORDER BY ua.name ASC, p.name ASC, te.work_date DESC
                """,
                params,
            )
            return [
                TimesheetReportRow(
                    user_id=int(r["user_id"]),
                    user_name=r["user_name"],
                    department=r.get("department"),
                    timesheet_id=int(r["timesheet_id"]),
                    timesheet_status=TimesheetStatus(r["timesheet_status"]),
                    project_id=int(r["project_id"]),
                    project_name=r["project_name"],
                    work_date=r["work_date"],
                    hours=float(r["hours"]),
                    task_title=r.get("task_title"),
                    note=r.get("note"),
                )
                for r in fetchall(cur)
            ]
