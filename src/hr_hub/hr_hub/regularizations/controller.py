from __future__ import annotations

from flask import Flask

from ..auth.decorators import current_user
from ..common.request_parsing import parse_body
from ..common.serialization import json_response
from ..container import Container
from ..core.enums import REVIEWER_ROLES
from .schemas import Decision, RegularizationCreate


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    regularizations = container.regularization_service

    @app.route("/api/attendance/me/regularization", methods=["POST"], endpoint="regularization_create")
    @guard.login_required
    def create():
        body = parse_body(RegularizationCreate)
        req = regularizations.create(
            user_id=current_user().user_id,
            work_date=body.work_date,
            type=body.type,
            proposed_time=body.proposed_time,
            reason=body.reason,
        )
        return json_response(req, 201)

    @app.route("/api/attendance/me/regularizations", methods=["GET"], endpoint="regularization_mine")
    @guard.login_required
    def mine():
        return json_response(regularizations.mine(current_user().user_id))

    @app.route("/api/attendance/regularizations", methods=["GET"], endpoint="regularization_pending")
    @guard.roles_required(*REVIEWER_ROLES)
    def pending():
        return json_response(regularizations.pending())

    @app.route(
        "/api/attendance/regularizations/<int:request_id>/decision",
        methods=["POST"],
        endpoint="regularization_decision",
    )
    @app.route(
        "/api/regularizations/<int:request_id>/decision",
        methods=["POST"],
        endpoint="regularization_decision_short",
    )
    @guard.roles_required(*REVIEWER_ROLES)
    def decide(request_id: int):
        body = parse_body(Decision)
        req = regularizations.decide(
            request_id=request_id,
            action=body.action,
            reviewer_id=current_user().user_id,
            comment=body.comment,
        )
        return json_response(req)
