from __future__ import annotations

from flask import Flask

from ..auth.decorators import current_user
from ..common.datetime_utils import now_local
from ..common.request_parsing import parse_body, parse_query
from ..common.serialization import json_response
from ..container import Container
from ..core.enums import REVIEWER_ROLES
from .schemas import CalendarQuery, DateRangeQuery, RecentQuery, TeamAttendanceUpdate, TeamDateQuery


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    attendance = container.attendance_service

    @app.route("/api/attendance/me/today", methods=["GET"], endpoint="attendance_today")
    @guard.login_required
    def today():
        return json_response(attendance.get_today(current_user().user_id))

    @app.route("/api/attendance/me/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @guard.login_required
    def clock_in():
        return json_response(attendance.clock_in(current_user().user_id))

    @app.route("/api/attendance/me/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @guard.login_required
    def clock_out():
        return json_response(attendance.clock_out(current_user().user_id))

    @app.route("/api/attendance/me/calendar", methods=["GET"], endpoint="attendance_calendar")
    @guard.login_required
    def calendar():
        q = parse_query(CalendarQuery)
        return json_response(attendance.calendar(current_user().user_id, year=q.year, month=q.month))

    @app.route("/api/attendance/me/weekly-summary", methods=["GET"], endpoint="attendance_weekly_summary")
    @guard.login_required
    def weekly_summary():
        return json_response(attendance.weekly_summary(current_user().user_id))

    @app.route("/api/attendance/me/recent", methods=["GET"], endpoint="attendance_recent")
    @guard.login_required
    def recent():
        q = parse_query(RecentQuery)
        return json_response(attendance.recent(current_user().user_id, days=q.days))

    @app.route("/api/attendance/team/update", methods=["PUT"], endpoint="attendance_team_update")
    @guard.roles_required(*REVIEWER_ROLES)
    def team_update():
        body = parse_body(TeamAttendanceUpdate)
        record = attendance.manager_upsert(
            user_id=body.user_id,
            work_date=body.work_date,
            status=body.status,
            check_in=body.check_in_time,
            check_out=body.check_out_time,
        )
        return json_response(record)

    @app.route("/api/attendance/team", methods=["GET"], endpoint="attendance_team")
    @guard.roles_required(*REVIEWER_ROLES)
    def team():
        q = parse_query(TeamDateQuery)
        return json_response(attendance.team_for_date(q.date or now_local().date()))

    @app.route("/api/attendance/employee/<int:employee_id>", methods=["GET"], endpoint="attendance_employee")
    @guard.roles_required(*REVIEWER_ROLES)
    def employee(employee_id: int):
        q = parse_query(DateRangeQuery)
        return json_response(attendance.employee_attendance(employee_id, start=q.start_date, end=q.end_date))
