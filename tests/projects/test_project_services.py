from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional

import pytest

from src.hr_hub.hr_hub.core.enums import Role, TaskStatus, TimesheetStatus
from src.hr_hub.hr_hub.core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError, ValidationError
from src.hr_hub.hr_hub.projects.model import Project, ProjectMember, Task, TaskComment
from src.hr_hub.hr_hub.projects.service import ProjectService, TaskService
from src.hr_hub.hr_hub.users.model import User


class InMemoryUsers:
    def __init__(self, *user_ids: int):
        self._ids = set(user_ids)

    def get_by_id(self, user_id: int) -> Optional[User]:
        if user_id not in self._ids:
            return None
        return User(user_id=user_id, name=f"U{user_id}", email=f"u{user_id}@x.io", password_hash="h", role=Role.EMPLOYEE)


class InMemoryProjects:
    def __init__(self):
        self.projects: dict[int, Project] = {}
        self.member_map: dict[int, dict[int, Optional[str]]] = {}

    def list_projects(self):
        return list(self.projects.values())

    def get(self, project_id):
        return self.projects.get(project_id)

    def create(self, *, name, manager_id, start_date, end_date, status, description=None, client_name=None) -> int:
        project_id = len(self.projects) + 1
        self.projects[project_id] = Project(
            project_id=project_id,
            name=name,
            manager_id=manager_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
            description=description,
            client_name=client_name,
        )
        self.member_map[project_id] = {}
        return project_id

    def update_fields(self, project_id, fields) -> bool:
        self.projects[project_id] = replace(self.projects[project_id], **fields)
        return True

    def members(self, project_id):
        return [
            ProjectMember(user_id=uid, name=f"U{uid}", email=f"u{uid}@x.io", role_label=label)
            for uid, label in self.member_map.get(project_id, {}).items()
        ]

    def upsert_member(self, *, project_id, user_id, role_label=None) -> None:
        self.member_map[project_id][user_id] = role_label

    def remove_member(self, *, project_id, user_id) -> bool:
        members = self.member_map.get(project_id, {})
        if user_id not in members:
            return False
        del members[user_id]
        return True

    def is_member(self, *, project_id, user_id) -> bool:
        return user_id in self.member_map.get(project_id, {})

    def projects_for_member(self, user_id):
        return [p for pid, p in self.projects.items() if user_id in self.member_map[pid] or p.manager_id == user_id]

    def projects_with_hours(self, user_id):
        return self.projects_for_member(user_id)


class InMemoryTasks:
    def __init__(self):
        self.tasks: dict[int, Task] = {}
        self.comment_rows: list[TaskComment] = []
        # task_id -> statuses of the timesheets holding time logged on it
        self.logged: dict[int, list[TimesheetStatus]] = {}
        self._next_id = 0

    def get(self, task_id):
        return self.tasks.get(task_id)

    def list_for_assignee(self, user_id):
        return [t for t in self.tasks.values() if t.assignee_id == user_id]

    def list_for_project(self, project_id):
        return [t for t in self.tasks.values() if t.project_id == project_id]

    def create(self, *, project_id, title, created_by_id, **fields) -> int:
        self._next_id += 1
        self.tasks[self._next_id] = Task(
            task_id=self._next_id, project_id=project_id, title=title, created_by_id=created_by_id, **fields
        )
        return self._next_id

    def update_fields(self, task_id, fields) -> bool:
        self.tasks[task_id] = replace(self.tasks[task_id], **fields)
        return True

    def delete_with_dependents(self, task_id, *, editable_statuses) -> bool:
        locked = [s for s in self.logged.get(task_id, []) if s not in editable_statuses]
        if locked:
            raise InvalidTransitionError(
                locked[0].value, locked[0].value, "Task has time logged on submitted or approved timesheets"
            )
        self.logged.pop(task_id, None)
        self.comment_rows = [c for c in self.comment_rows if c.task_id != task_id]
        return self.tasks.pop(task_id, None) is not None

    def add_comment(self, *, task_id, author_id, body) -> int:
        comment_id = len(self.comment_rows) + 1
        self.comment_rows.append(TaskComment(comment_id=comment_id, task_id=task_id, author_id=author_id, body=body))
        return comment_id

    def comments(self, task_id):
        return [c for c in self.comment_rows if c.task_id == task_id]


MANAGER, MEMBER, OUTSIDER, CREATOR = 1, 2, 3, 4


def _services():
    projects, tasks = InMemoryProjects(), InMemoryTasks()
    users = InMemoryUsers(MANAGER, MEMBER, OUTSIDER, CREATOR)
    return ProjectService(projects, tasks, users), TaskService(tasks, projects), projects, tasks


def _project(svc: ProjectService, **overrides) -> Project:
    data = dict(name="Apollo", manager_id=MANAGER, start_date=date(2026, 1, 1), end_date=date(2026, 6, 30))
    data.update(overrides)
    return svc.create_project(**data)


def test_create_project_requires_existing_manager():
    svc, *_ = _services()
    with pytest.raises(ValidationError, match="Manager not found"):
        _project(svc, manager_id=99)


def test_create_project_rejects_inverted_dates():
    svc, *_ = _services()
    with pytest.raises(ValidationError, match="End date cannot be before start date"):
        _project(svc, start_date=date(2026, 6, 1), end_date=date(2026, 1, 1))


def test_update_project_checks_dates_against_stored_values():
    svc, *_ = _services()
    project = _project(svc)

    with pytest.raises(ValidationError):
        svc.update_project(project.project_id, {"end_date": date(2025, 12, 31)})

    updated = svc.update_project(project.project_id, {"name": "Apollo II", "description": None})
    assert updated.name == "Apollo II"


def test_members_add_and_remove():
    svc, *_ = _services()
    project = _project(svc)

    detail = svc.add_member(project_id=project.project_id, user_id=MEMBER, role_label="dev")
    assert [(m.user_id, m.role_label) for m in detail.members] == [(MEMBER, "dev")]

    svc.remove_member(project_id=project.project_id, user_id=MEMBER)
    with pytest.raises(NotFoundError, match="Member not found in project"):
        svc.remove_member(project_id=project.project_id, user_id=MEMBER)


def test_add_unknown_user_as_member():
    svc, *_ = _services()
    project = _project(svc)
    with pytest.raises(NotFoundError, match="User not found"):
        svc.add_member(project_id=project.project_id, user_id=99)


def test_member_tasks_requires_membership():
    svc, tasks_svc, *_ = _services()
    project = _project(svc)
    svc.add_member(project_id=project.project_id, user_id=MEMBER)
    tasks_svc.create_task(project_id=project.project_id, title="Design", created_by_id=MANAGER)

    assert len(svc.member_tasks(user_id=MEMBER, project_id=project.project_id)) == 1
    assert len(svc.member_tasks(user_id=MANAGER, project_id=project.project_id)) == 1
    with pytest.raises(AuthorizationError):
        svc.member_tasks(user_id=OUTSIDER, project_id=project.project_id)


def test_create_task_in_unknown_project():
    _, tasks_svc, *_ = _services()
    with pytest.raises(NotFoundError, match="Project not found"):
        tasks_svc.create_task(project_id=5, title="X", created_by_id=CREATOR)


def test_publish_date_sets_flag():
    svc, tasks_svc, *_ = _services()
    project = _project(svc)

    task = tasks_svc.create_task(
        project_id=project.project_id, title="Release", created_by_id=CREATOR, publish_date=date(2026, 3, 1)
    )

    assert task.has_publish_date is True
    assert task.status == TaskStatus.TODO


@pytest.mark.parametrize(
    "actor_id, role, allowed",
    [
        (OUTSIDER, Role.EMPLOYEE, False),
        (OUTSIDER, Role.HR, False),
        (OUTSIDER, Role.ADMIN, True),
        (CREATOR, Role.EMPLOYEE, True),
        (MEMBER, Role.EMPLOYEE, True),
        (MANAGER, Role.EMPLOYEE, True),
    ],
)
def test_delete_task_permissions(actor_id, role, allowed):
    svc, tasks_svc, _, tasks = _services()
    project = _project(svc)
    task = tasks_svc.create_task(
        project_id=project.project_id, title="Cleanup", created_by_id=CREATOR, assignee_id=MEMBER
    )
    tasks_svc.add_comment(task_id=task.task_id, author_id=MEMBER, text="on it")

    if allowed:
        tasks_svc.delete_task(task.task_id, actor_id=actor_id, actor_role=role)
        assert task.task_id not in tasks.tasks
        assert tasks.comment_rows == []
    else:
        with pytest.raises(AuthorizationError):
            tasks_svc.delete_task(task.task_id, actor_id=actor_id, actor_role=role)
        assert task.task_id in tasks.tasks


def test_blank_comment_rejected():
    svc, tasks_svc, *_ = _services()
    project = _project(svc)
    task = tasks_svc.create_task(project_id=project.project_id, title="T", created_by_id=CREATOR)

    with pytest.raises(ValidationError, match="Comment is required"):
        tasks_svc.add_comment(task_id=task.task_id, author_id=MEMBER, text="   ")

    comment = tasks_svc.add_comment(task_id=task.task_id, author_id=MEMBER, text=" looks good ")
    assert comment.body == "looks good"
    assert [c.comment_id for c in tasks_svc.comments(task.task_id)] == [comment.comment_id]


@pytest.mark.parametrize("status", [TimesheetStatus.SUBMITTED, TimesheetStatus.APPROVED])
def test_task_with_time_on_locked_timesheet_cannot_be_deleted(status):
    svc, tasks_svc, _, tasks = _services()
    project = _project(svc)
    task = tasks_svc.create_task(project_id=project.project_id, title="Build", created_by_id=CREATOR)
    tasks.logged[task.task_id] = [TimesheetStatus.DRAFT, status]

    with pytest.raises(InvalidTransitionError, match="submitted or approved timesheets"):
        tasks_svc.delete_task(task.task_id, actor_id=CREATOR, actor_role=Role.EMPLOYEE)

    assert task.task_id in tasks.tasks
    assert tasks.logged[task.task_id] == [TimesheetStatus.DRAFT, status]


def test_task_with_time_on_editable_timesheets_is_deleted():
    svc, tasks_svc, _, tasks = _services()
    project = _project(svc)
    task = tasks_svc.create_task(project_id=project.project_id, title="Build", created_by_id=CREATOR)
    tasks.logged[task.task_id] = [TimesheetStatus.DRAFT, TimesheetStatus.REJECTED]

    tasks_svc.delete_task(task.task_id, actor_id=CREATOR, actor_role=Role.EMPLOYEE)

    assert task.task_id not in tasks.tasks
    assert task.task_id not in tasks.logged
