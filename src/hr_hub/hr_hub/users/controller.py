from __future__ import annotations

from flask import Flask

from ..common.request_parsing import parse_body, parse_query
from ..common.serialization import json_response
from ..container import Container
from ..core.enums import PEOPLE_ADMIN_ROLES, REVIEWER_ROLES
from .model import public_user
from .schemas import EmployeeCreate, EmployeeQuery, EmployeeUpdate
from .service import NewEmployee


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    employees = container.employee_service

    @app.route("/api/employees", methods=["GET"], endpoint="employee_list")
    @guard.roles_required(*REVIEWER_ROLES)
    def list_employees():
        q = parse_query(EmployeeQuery)
        return json_response([public_user(u) for u in employees.list_employees(role=q.role, active=q.active)])

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="employee_get")
    @guard.roles_required(*REVIEWER_ROLES)
    def get_employee(employee_id: int):
        return json_response(public_user(employees.get_employee(employee_id)))

    @app.route("/api/employees", methods=["POST"], endpoint="employee_create")
    @guard.roles_required(*PEOPLE_ADMIN_ROLES)
    def create_employee():
        body = parse_body(EmployeeCreate)
        user = employees.create_employee(NewEmployee(**body.model_dump()))
        return json_response(public_user(user), 201)

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="employee_update")
    @guard.roles_required(*PEOPLE_ADMIN_ROLES)
    def update_employee(employee_id: int):
        body = parse_body(EmployeeUpdate)
        user = employees.update_employee(employee_id, body.model_dump(exclude_unset=True))
        return json_response(public_user(user))
