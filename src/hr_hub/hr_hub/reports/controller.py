from __future__ import annotations

from flask import Flask

from ..common.request_parsing import parse_query
from ..common.serialization import json_response
from ..container import Container
from ..core.enums import REPORT_ROLES
from .schemas import ReportQuery


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    reports = container.report_service

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="report_attendance")
    @guard.roles_required(*REPORT_ROLES)
    def attendance_report():
        return json_response(reports.attendance_report(parse_query(ReportQuery).to_filter()))

    @app.route("/api/reports/timesheets", methods=["GET"], endpoint="report_timesheets")
    @guard.roles_required(*REPORT_ROLES)
    def timesheet_report():
        return json_response(reports.timesheet_report(parse_query(ReportQuery).to_filter()))
