from __future__ import annotations

from datetime import date
from enum import Enum
from typing import AbstractSet, Any, Dict, Mapping, Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus, TimesheetStatus
from ..core.exceptions import InvalidTransitionError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Task, TaskComment
from .repository import TASK_COLUMNS, TaskRepository

_SELECT = """
    SELECT t.id, t.project_id, t.title, t.description, t.assignee_id, t.status, t.priority, t.due_date,
           t.has_publish_date, t.publish_date, t.created_by_id, t.created_at,
           p.name AS project_name, a.name AS assignee_name
    FROM task t
    JOIN project p ON p.id = t.project_id
    LEFT JOIN user_account a ON a.id = t.assignee_id
"""


def _row_to_task(row: Dict[str, Any]) -> Task:
    return Task(
        task_id=int(row["id"]),
        project_id=int(row["project_id"]),
        title=row["title"],
        status=TaskStatus(row["status"]),
        priority=TaskPriority(row["priority"]),
        description=row.get("description"),
        assignee_id=int(row["assignee_id"]) if row.get("assignee_id") else None,
        due_date=row.get("due_date"),
        has_publish_date=bool(row.get("has_publish_date")),
        publish_date=row.get("publish_date"),
        created_by_id=int(row["created_by_id"]) if row.get("created_by_id") else None,
        created_at=row.get("created_at"),
        project_name=row.get("project_name"),
        assignee_name=row.get("assignee_name"),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE t.id=%s", (int(task_id),))
            row = fetchone(cur)
            return _row_to_task(row) if row else None

    def list_for_assignee(self, user_id: int) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            # MySQL sorts NULL first ascending; push tasks without due date last
            cur.execute(
                _SELECT + " WHERE t.assignee_id=%s ORDER BY t.due_date IS NULL, t.due_date ASC, t.created_at DESC",
                (int(user_id),),
            )
            return [_row_to_task(r) for r in fetchall(cur)]

    def list_for_project(self, project_id: int) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE t.project_id=%s ORDER BY t.created_at DESC, t.id DESC", (int(project_id),))
            return [_row_to_task(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO task
                    (project_id, title, description, assignee_id, status, priority, due_date,
                     has_publish_date, publish_date, created_by_id)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    int(project_id),
                    title,
                    description,
                    assignee_id,
                    status.value,
                    priority.value,
                    due_date,
                    1 if has_publish_date else 0,
                    publish_date,
                    int(created_by_id),
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, task_id: int, fields: Mapping[str, Any]) -> bool:
        unknown = set(fields) - TASK_COLUMNS
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")
        if not fields:
            return False

        assignments = ", ".join(f"{col}=%s" for col in fields)
        params = [v.value if isinstance(v, Enum) else v for v in fields.values()]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE task SET {assignments}, updated_at=NOW() WHERE id=%s", (*params, int(task_id)))
            return cur.rowcount > 0

    def delete_with_dependents(self, task_id: int, *, editable_statuses: AbstractSet[TimesheetStatus]) -> bool:
        editable = {s.value for s in editable_statuses}
        with db_cursor(self._conn_factory) as (_, cur):
            # Lock the owning timesheets so none of them gets submitted mid-delete.
            cur.execute(
                """
                SELECT ts.id, ts.status
                FROM timesheet_entry te JOIN timesheet ts ON ts.id = te.timesheet_id
                WHERE te.task_id=%s
                FOR UPDATE
                """,
                (int(task_id),),
            )
            locked = [r for r in fetchall(cur) if r["status"] not in editable]
            if locked:
                raise InvalidTransitionError(
                    locked[0]["status"],
                    locked[0]["status"],
                    "Task has time logged on submitted or approved timesheets",
                )
            cur.execute("DELETE FROM task_comment WHERE task_id=%s", (int(task_id),))
            cur.execute("DELETE FROM timesheet_entry WHERE task_id=%s", (int(task_id),))
            cur.execute("DELETE FROM task WHERE id=%s", (int(task_id),))
            return cur.rowcount > 0

    def add_comment(self, *, task_id: int, author_id: int, body: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO task_comment (task_id, author_id, body) VALUES (%s, %s, %s)",
                (int(task_id), int(author_id), body),
            )
            return int(cur.lastrowid)

    def comments(self, task_id: int) -> Sequence[TaskComment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.id, c.task_id, c.author_id, c.body, c.created_at, ua.name AS author_name
                FROM task_comment c LEFT JOIN user_account ua ON ua.id = c.author_id
                WHERE c.task_id=%s
                ORDER BY c.created_at ASC, c.id ASC
                """,
                (int(task_id),),
            )
            return [
                TaskComment(
                    comment_id=int(r["id"]),
                    task_id=int(r["task_id"]),
                    author_id=int(r["author_id"]),
                    body=r["body"],
                    created_at=r.get("created_at"),
                    author_name=r.get("author_name"),
                )
                for r in fetchall(cur)
            ]
