from __future__ import annotations

from datetime import date
from typing import AbstractSet, Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import ProjectStatus, TaskPriority, TaskStatus, TimesheetStatus
from .model import Project, ProjectMember, Task, TaskComment

PROJECT_COLUMNS = frozenset({"name", "description", "client_name", "manager_id", "start_date", "end_date", "status"})
TASK_COLUMNS = frozenset(
    {
        "title",
        "description",
        "assignee_id",
        "status",
        "priority",
        "due_date",
        "has_publish_date",
        "publish_date",
    }
)


class ProjectRepository(Protocol):
    def list_projects(self) -> Sequence[Project]:
        raise NotImplementedError

    def get(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        manager_id: int,
        start_date: date,
        end_date: date,
        status: ProjectStatus = ProjectStatus.ACTIVE,
        description: Optional[str] = None,
        client_name: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_fields(self, project_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def members(self, project_id: int) -> Sequence[ProjectMember]:
        raise NotImplementedError

    def upsert_member(self, *, project_id: int, user_id: int, role_label: Optional[str] = None) -> None:
        raise NotImplementedError

    def remove_member(self, *, project_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def is_member(self, *, project_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def projects_for_member(self, user_id: int) -> Sequence[Project]:
        raise NotImplementedError

    def projects_with_hours(self, user_id: int) -> Sequence[Project]:
        """Projects the user belongs to or logged time on, with logged_hours filled."""
        raise NotImplementedError


class TaskRepository(Protocol):
    def get(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_for_assignee(self, user_id: int) -> Sequence[Task]:
        raise NotImplementedError

    def list_for_project(self, project_id: int) -> Sequence[Task]:
        raise NotImplementedError

    def create(
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
        has_publish_date: bool = False,
        publish_date: Optional[date] = None,
    ) -> int:
        raise NotImplementedError

    def update_fields(self, task_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def delete_with_dependents(self, task_id: int, *, editable_statuses: AbstractSet[TimesheetStatus]) -> bool:
        """Delete the task, its comments and its timesheet entries in one transaction.

        Raises InvalidTransitionError, deleting nothing, when an entry belongs to a
        timesheet whose status is not in editable_statuses.
        """
        raise NotImplementedError

    def add_comment(self, *, task_id: int, author_id: int, body: str) -> int:
        raise NotImplementedError

    def comments(self, task_id: int) -> Sequence[TaskComment]:
        raise NotImplementedError
