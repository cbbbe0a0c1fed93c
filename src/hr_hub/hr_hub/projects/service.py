from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional

from ..approvals import gate
from ..common.validators import require_non_empty
from ..core.enums import ProjectStatus, Role, TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Project, ProjectDetail, Task, TaskComment
from .repository import ProjectRepository, TaskRepository

logger = logging.getLogger(__name__)

# Roles allowed to delete any task regardless of ownership
TASK_ADMIN_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


def _check_dates(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValidationError("End date cannot be before start date")


class ProjectService:
    def __init__(self, projects: ProjectRepository, tasks: TaskRepository, users: UserRepository):
        self._projects = projects
        self._tasks = tasks
        self._users = users

    def list_projects(self):
        return self._projects.list_projects()

    def _require(self, project_id: int) -> Project:
        project = self._projects.get(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        return project

    def get_project(self, project_id: int) -> ProjectDetail:
        project = self._require(project_id)
        return ProjectDetail(
            project=project,
            members=tuple(self._projects.members(project.project_id)),
            tasks=tuple(self._tasks.list_for_project(project.project_id)),
        )

    def _require_manager(self, manager_id: int) -> None:
        if not self._users.get_by_id(int(manager_id)):
            raise ValidationError("Manager not found")

    def create_project(
        self,
        *,
        name: str,
        manager_id: int,
        start_date: date,
        end_date: date,
        status: ProjectStatus = ProjectStatus.ACTIVE,
        description: Optional[str] = None,
        client_name: Optional[str] = None,
    ) -> Project:
        name = require_non_empty(name, "Project name")
        self._require_manager(manager_id)
        _check_dates(start_date, end_date)

        project_id = self._projects.create(
            name=name,
            manager_id=int(manager_id),
            start_date=start_date,
            end_date=end_date,
            status=status,
            description=description,
            client_name=client_name,
        )
        logger.info("Project %s '%s' created", project_id, name)
        return self._require(project_id)

    def update_project(self, project_id: int, changes: Mapping[str, Any]) -> Project:
        current = self._require(project_id)
        fields = {k: v for k, v in changes.items() if v is not None}
        if "name" in fields:
            fields["name"] = require_non_empty(fields["name"], "Project name")
        if "manager_id" in fields:
            self._require_manager(fields["manager_id"])
        _check_dates(fields.get("start_date", current.start_date), fields.get("end_date", current.end_date))

        self._projects.update_fields(current.project_id, fields)
        return self._require(project_id)

    def add_member(self, *, project_id: int, user_id: int, role_label: Optional[str] = None) -> ProjectDetail:
        self._require(project_id)
        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("User not found")
        self._projects.upsert_member(project_id=int(project_id), user_id=int(user_id), role_label=role_label)
        return self.get_project(project_id)

    def remove_member(self, *, project_id: int, user_id: int) -> None:
        self._require(project_id)
        if not self._projects.remove_member(project_id=int(project_id), user_id=int(user_id)):
            raise NotFoundError("Member not found in project")

    def employee_projects(self, employee_id: int):
        return self._projects.projects_with_hours(int(employee_id))

    def member_projects(self, user_id: int):
        return self._projects.projects_for_member(int(user_id))

    def member_tasks(self, *, user_id: int, project_id: int):
        """Tasks of a project the user can log time against."""
        project = self._require(project_id)
        if project.manager_id != int(user_id) and not self._projects.is_member(
            project_id=project.project_id, user_id=int(user_id)
        ):
            raise AuthorizationError("You are not a member of this project")
        return self._tasks.list_for_project(project.project_id)


class TaskService:
    def __init__(self, tasks: TaskRepository, projects: ProjectRepository):
        self._tasks = tasks
        self._projects = projects

    def my_tasks(self, user_id: int):
        return self._tasks.list_for_assignee(int(user_id))

    def project_tasks(self, project_id: int):
        if not self._projects.get(int(project_id)):
            raise NotFoundError("Project not found")
        return self._tasks.list_for_project(int(project_id))

    def get_task(self, task_id: int) -> Task:
        task = self._tasks.get(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def create_task(
        self,
        *,
        project_id: int,
        title: str,
        created_by_id: int,
        description: Optional[str] = None,
        assignee_id: Optional[int] = None,
        status: TaskStatus = TaskStatus.TODO,
        priority: TaskPriority = TaskPriority.MEDIUM,
        due_date: Optional[date] = None,
        publish_date: Optional[date] = None,
    ) -> Task:
        title = require_non_empty(title, "Task title")
        if not self._projects.get(int(project_id)):
            raise NotFoundError("Project not found")

        task_id = self._tasks.create(
            project_id=int(project_id),
            title=title,
            created_by_id=int(created_by_id),
            description=description,
            assignee_id=int(assignee_id) if assignee_id else None,
            status=status,
            priority=priority,
            due_date=due_date,
            has_publish_date=publish_date is not None,
            publish_date=publish_date,
        )
        logger.info("Task %s created in project %s by user %s", task_id, project_id, created_by_id)
        return self.get_task(task_id)

    def update_task(self, task_id: int, changes: Mapping[str, Any]) -> Task:
        self.get_task(task_id)
        fields = {k: v for k, v in changes.items() if v is not None}
        if "title" in fields:
            fields["title"] = require_non_empty(fields["title"], "Task title")
        if "publish_date" in fields:
            fields["has_publish_date"] = True

        self._tasks.update_fields(int(task_id), fields)
        return self.get_task(task_id)

    def delete_task(self, task_id: int, *, actor_id: int, actor_role: Role) -> None:
        task = self.get_task(task_id)
        project = self._projects.get(task.project_id)
        allowed = (
            actor_role in TASK_ADMIN_ROLES
            or task.created_by_id == int(actor_id)
            or task.assignee_id == int(actor_id)
            or (project is not None and project.manager_id == int(actor_id))
        )
        if not allowed:
            raise AuthorizationError("Not allowed to delete this task")

        self._tasks.delete_with_dependents(task.task_id, editable_statuses=gate.MUTABLE_STATUSES)
        logger.info("Task %s deleted by user %s", task.task_id, actor_id)

    def add_comment(self, *, task_id: int, author_id: int, text: str) -> TaskComment:
        body = require_non_empty(text, "Comment")
        task = self.get_task(task_id)
        comment_id = self._tasks.add_comment(task_id=task.task_id, author_id=int(author_id), body=body)
        for c in self._tasks.comments(task.task_id):
            if c.comment_id == comment_id:
                return c
        return TaskComment(comment_id=comment_id, task_id=task.task_id, author_id=int(author_id), body=body)

    def comments(self, task_id: int):
        task = self.get_task(task_id)
        return self._tasks.comments(task.task_id)
