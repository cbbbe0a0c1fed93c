from __future__ import annotations

from flask import Flask

from ..auth.decorators import current_user
from ..common.request_parsing import parse_body
from ..common.serialization import json_response
from ..container import Container
from ..core.enums import REVIEWER_ROLES
from .schemas import CommentCreate, MemberAdd, ProjectCreate, ProjectUpdate, TaskCreate, TaskUpdate


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    projects = container.project_service
    tasks = container.task_service

    # Projects: read for everyone, write for manager/hr/admin

    @app.route("/api/projects", methods=["GET"], endpoint="project_list")
    @guard.login_required
    def list_projects():
        return json_response(projects.list_projects())

    @app.route("/api/projects", methods=["POST"], endpoint="project_create")
    @guard.roles_required(*REVIEWER_ROLES)
    def create_project():
        body = parse_body(ProjectCreate)
        project = projects.create_project(
            name=body.name,
            manager_id=body.manager_id,
            start_date=body.start_date,
            end_date=body.end_date,
            status=body.status,
            description=body.description,
            client_name=body.client_name,
        )
        return json_response(project, 201)

    @app.route("/api/projects/<int:project_id>", methods=["GET"], endpoint="project_get")
    @guard.login_required
    def get_project(project_id: int):
        return json_response(projects.get_project(project_id))

    @app.route("/api/projects/<int:project_id>", methods=["PUT"], endpoint="project_update")
    @guard.roles_required(*REVIEWER_ROLES)
    def update_project(project_id: int):
        body = parse_body(ProjectUpdate)
        return json_response(projects.update_project(project_id, body.model_dump(exclude_unset=True)))

    @app.route("/api/projects/<int:project_id>/members", methods=["POST"], endpoint="project_add_member")
    @guard.roles_required(*REVIEWER_ROLES)
    def add_member(project_id: int):
        body = parse_body(MemberAdd)
        detail = projects.add_member(project_id=project_id, user_id=body.user_id, role_label=body.role_label)
        return json_response(detail, 201)

    @app.route(
        "/api/projects/<int:project_id>/members/<int:user_id>",
        methods=["DELETE"],
        endpoint="project_remove_member",
    )
    @guard.roles_required(*REVIEWER_ROLES)
    def remove_member(project_id: int, user_id: int):
        projects.remove_member(project_id=project_id, user_id=user_id)
        return json_response({"message": "Member removed"})

    @app.route("/api/projects/employee/<int:employee_id>", methods=["GET"], endpoint="project_employee")
    @guard.login_required
    def employee_projects(employee_id: int):
        return json_response(projects.employee_projects(employee_id))

    # Tasks

    @app.route("/api/tasks/me", methods=["GET"], endpoint="task_mine")
    @guard.login_required
    def my_tasks():
        return json_response(tasks.my_tasks(current_user().user_id))

    @app.route("/api/tasks/project/<int:project_id>", methods=["GET"], endpoint="task_by_project")
    @guard.login_required
    def project_tasks(project_id: int):
        return json_response(tasks.project_tasks(project_id))

    @app.route("/api/tasks", methods=["POST"], endpoint="task_create")
    @guard.login_required
    def create_task():
        body = parse_body(TaskCreate)
        task = tasks.create_task(
            project_id=body.project_id,
            title=body.title,
            created_by_id=current_user().user_id,
            description=body.description,
            assignee_id=body.assignee_id,
            status=body.status,
            priority=body.priority,
            due_date=body.due_date,
            publish_date=body.publish_date,
        )
        return json_response(task, 201)

    @app.route("/api/tasks/<int:task_id>", methods=["GET"], endpoint="task_get")
    @guard.login_required
    def get_task(task_id: int):
        return json_response({"task": tasks.get_task(task_id), "comments": tasks.comments(task_id)})

    @app.route("/api/tasks/<int:task_id>", methods=["PUT"], endpoint="task_update")
    @guard.login_required
    def update_task(task_id: int):
        body = parse_body(TaskUpdate)
        return json_response(tasks.update_task(task_id, body.model_dump(exclude_unset=True)))

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="task_delete")
    @guard.login_required
    def delete_task(task_id: int):
        me = current_user()
        tasks.delete_task(task_id, actor_id=me.user_id, actor_role=me.role)
        return json_response({"message": "Task deleted"})

    @app.route("/api/tasks/<int:task_id>/comments", methods=["GET"], endpoint="task_comments")
    @guard.login_required
    def task_comments(task_id: int):
        return json_response(tasks.comments(task_id))

    @app.route("/api/tasks/<int:task_id>/comments", methods=["POST"], endpoint="task_add_comment")
    @guard.login_required
    def add_comment(task_id: int):
        body = parse_body(CommentCreate)
        comment = tasks.add_comment(task_id=task_id, author_id=current_user().user_id, text=body.text)
        return json_response(comment, 201)
