from __future__ import annotations

import datetime
from typing import Optional

from pydantic import Field

from ..common.request_parsing import CamelModel
from ..core.enums import ProjectStatus, TaskPriority, TaskStatus


class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    manager_id: int = Field(..., gt=0)
    start_date: datetime.date
    end_date: datetime.date
    status: ProjectStatus = ProjectStatus.ACTIVE
    description: Optional[str] = None
    client_name: Optional[str] = Field(None, max_length=200)


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    manager_id: Optional[int] = Field(None, gt=0)
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    status: Optional[ProjectStatus] = None
    description: Optional[str] = None
    client_name: Optional[str] = Field(None, max_length=200)


class MemberAdd(CamelModel):
    user_id: int = Field(..., gt=0)
    role_label: Optional[str] = Field(None, max_length=100)


class TaskCreate(CamelModel):
    project_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    assignee_id: Optional[int] = Field(None, gt=0)
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime.date] = None
    publish_date: Optional[datetime.date] = None


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    assignee_id: Optional[int] = Field(None, gt=0)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime.date] = None
    publish_date: Optional[datetime.date] = None


class CommentCreate(CamelModel):
    text: str = Field(..., min_length=1, max_length=5000)
