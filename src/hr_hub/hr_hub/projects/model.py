from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import ProjectStatus, TaskPriority, TaskStatus


@dataclass(frozen=True)
class Project:
    """Domain entity: a client/internal project.

    The counters are filled only by listing queries.
    """

    project_id: int
    name: str
    manager_id: int
    start_date: date
    end_date: date
    status: ProjectStatus = ProjectStatus.ACTIVE
    description: Optional[str] = None
    client_name: Optional[str] = None
    manager_name: Optional[str] = None
    member_count: int = 0
    task_count: int = 0
    completed_task_count: int = 0
    logged_hours: Optional[float] = None


@dataclass(frozen=True)
class ProjectMember:
    user_id: int
    name: str
    email: str
    role_label: Optional[str] = None


@dataclass(frozen=True)
class Task:
    task_id: int
    project_id: int
    title: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    description: Optional[str] = None
    assignee_id: Optional[int] = None
    due_date: Optional[date] = None
    has_publish_date: bool = False
    publish_date: Optional[date] = None
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    project_name: Optional[str] = None
    assignee_name: Optional[str] = None


@dataclass(frozen=True)
class TaskComment:
    comment_id: int
    task_id: int
    author_id: int
    body: str
    created_at: Optional[datetime] = None
    author_name: Optional[str] = None


@dataclass(frozen=True)
class ProjectDetail:
    project: Project
    members: tuple[ProjectMember, ...] = field(default_factory=tuple)
    tasks: tuple[Task, ...] = field(default_factory=tuple)
