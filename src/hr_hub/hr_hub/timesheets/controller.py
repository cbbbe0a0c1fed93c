from __future__ import annotations

from flask import Flask

from ..auth.decorators import current_user
from ..common.request_parsing import parse_body, parse_query
from ..common.serialization import json_response
from ..container import Container
from ..core.enums import REVIEWER_ROLES
from .schemas import EntriesQuery, SaveWeek, SubmitWeek, TimesheetDecision, WeekQuery


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    timesheets = container.timesheet_service
    projects = container.project_service

    @app.route("/api/timesheets/me", methods=["GET"], endpoint="timesheet_week")
    @guard.login_required
    def my_week():
        q = parse_query(WeekQuery)
        return json_response(timesheets.get_week(user_id=current_user().user_id, week_start=q.week_start_date))

    @app.route("/api/timesheets/me/save", methods=["POST"], endpoint="timesheet_save")
    @guard.login_required
    def save_week():
        body = parse_body(SaveWeek)
        sheet = timesheets.save_week(
            user_id=current_user().user_id,
            week_start=body.week_start_date,
            entries=[e.to_entry() for e in body.entries],
        )
        return json_response(sheet)

    @app.route("/api/timesheets/me/submit", methods=["POST"], endpoint="timesheet_submit")
    @guard.login_required
    def submit_week():
        body = parse_body(SubmitWeek)
        return json_response(timesheets.submit_week(user_id=current_user().user_id, week_start=body.week_start_date))

    @app.route("/api/timesheets/entry/<int:entry_id>", methods=["DELETE"], endpoint="timesheet_delete_entry")
    @guard.login_required
    def delete_entry(entry_id: int):
        timesheets.delete_entry(entry_id=entry_id, user_id=current_user().user_id)
        return json_response({"message": "Entry deleted"})

    @app.route("/api/timesheets/me/projects", methods=["GET"], endpoint="timesheet_my_projects")
    @guard.login_required
    def my_projects():
        return json_response(projects.member_projects(current_user().user_id))

    @app.route("/api/timesheets/me/projects/<int:project_id>/tasks", methods=["GET"], endpoint="timesheet_my_tasks")
    @guard.login_required
    def my_project_tasks(project_id: int):
        return json_response(projects.member_tasks(user_id=current_user().user_id, project_id=project_id))

    @app.route("/api/timesheets/me/entries", methods=["GET"], endpoint="timesheet_my_entries")
    @guard.login_required
    def my_entries():
        q = parse_query(EntriesQuery)
        return json_response(timesheets.entries_for_date(user_id=current_user().user_id, work_date=q.date))

    @app.route("/api/timesheets/task/<int:task_id>/logs", methods=["GET"], endpoint="timesheet_task_logs")
    @guard.login_required
    def task_logs(task_id: int):
        return json_response(timesheets.task_logs(task_id))

    @app.route("/api/timesheets/approvals", methods=["GET"], endpoint="timesheet_approvals")
    @guard.roles_required(*REVIEWER_ROLES)
    def approvals():
        return json_response(timesheets.approval_queue())

    @app.route("/api/timesheets/employee/<int:employee_id>", methods=["GET"], endpoint="timesheet_employee")
    @guard.roles_required(*REVIEWER_ROLES)
    def employee_timesheets(employee_id: int):
        return json_response(timesheets.employee_timesheets(employee_id))

    @app.route("/api/timesheets/<int:timesheet_id>/decision", methods=["POST"], endpoint="timesheet_decision")
    @guard.roles_required(*REVIEWER_ROLES)
    def decide(timesheet_id: int):
        body = parse_body(TimesheetDecision)
        sheet = timesheets.review_week(
            timesheet_id=timesheet_id,
            action=body.action,
            reviewer_id=current_user().user_id,
            reason=body.reason,
        )
        return json_response(sheet)
