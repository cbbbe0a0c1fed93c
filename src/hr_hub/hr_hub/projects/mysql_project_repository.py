from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.enums import ProjectStatus, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Project, ProjectMember
from .repository import PROJECT_COLUMNS, ProjectRepository

_SUMMARY_SELECT = """
    SELECT p.id, p.name, p.description, p.client_name, p.manager_id, p.start_date, p.end_date, p.status,
           m.name AS manager_name,
           (SELECT COUNT(*) FROM project_member pm WHERE pm.project_id = p.id) AS member_count,
           (SELECT COUNT(*) FROM task t WHERE t.project_id = p.id) AS task_count,
           (SELECT COUNT(*) FROM task t WHERE t.project_id = p.id AND t.status = %s) AS completed_task_count
    FROM project p
    LEFT JOIN user_account m ON m.id = p.manager_id
"""


def _row_to_project(row: Dict[str, Any]) -> Project:
    hours = row.get("logged_hours")
    return Project(
        project_id=int(row["id"]),
        name=row["name"],
        manager_id=int(row["manager_id"]),
        start_date=row["start_date"],
        end_date=row["end_date"],
        status=ProjectStatus(row["status"]),
        description=row.get("description"),
        client_name=row.get("client_name"),
        manager_name=row.get("manager_name"),
        member_count=int(row.get("member_count") or 0),
        task_count=int(row.get("task_count") or 0),
        completed_task_count=int(row.get("completed_task_count") or 0),
        logged_hours=float(hours) if hours is not None else None,
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, company_id: int = 1):
        self._conn_factory = conn_factory
        self._company_id = int(company_id)

    def list_projects(self) -> Sequence[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SUMMARY_SELECT + " WHERE p.company_id=%s ORDER BY p.created_at DESC, p.id DESC",
                (TaskStatus.DONE.value, self._company_id),
            )
            return [_row_to_project(r) for r in fetchall(cur)]

    def get(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SUMMARY_SELECT + " WHERE p.id=%s", (TaskStatus.DONE.value, int(project_id)))
            row = fetchone(cur)
            return _row_to_project(row) if row else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO project (company_id, name, description, client_name, manager_id, start_date, end_date, status)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    self._company_id,
                    name,
                    description,
                    client_name,
                    int(manager_id),
                    start_date,
                    end_date,
                    status.value,
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, project_id: int, fields: Mapping[str, Any]) -> bool:
        unknown = set(fields) - PROJECT_COLUMNS
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")
        if not fields:
            return False

        assignments = ", ".join(f"{col}=%s" for col in fields)
        params = [v.value if isinstance(v, Enum) else v for v in fields.values()]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE project SET {assignments}, updated_at=NOW() WHERE id=%s",
                (*params, int(project_id)),
            )
            return cur.rowcount > 0

    def members(self, project_id: int) -> Sequence[ProjectMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT pm.user_id, ua.name, ua.email, pm.role_label
                FROM project_member pm JOIN user_account ua ON ua.id = pm.user_id
                WHERE pm.project_id=%s
                ORDER BY ua.name
                """,
                (int(project_id),),
            )
            return [
                ProjectMember(
                    user_id=int(r["user_id"]),
                    name=r["name"],
                    email=r["email"],
                    role_label=r.get("role_label"),
                )
                for r in fetchall(cur)
            ]

    def upsert_member(self, *, project_id: int, user_id: int, role_label: Optional[str] = None) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO project_member (project_id, user_id, role_label) VALUES (%s, %s, %s)
                ON DUPLICATE KEY UPDATE role_label = VALUES(role_label)
                """,
                (int(project_id), int(user_id), role_label),
            )

    def remove_member(self, *, project_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM project_member WHERE project_id=%s AND user_id=%s",
                (int(project_id), int(user_id)),
            )
            return cur.rowcount > 0

    def is_member(self, *, project_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM project_member WHERE project_id=%s AND user_id=%s",
                (int(project_id), int(user_id)),
            )
            return fetchone(cur) is not None

    def projects_for_member(self, user_id: int) -> Sequence[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SUMMARY_SELECT
                + """
                JOIN project_member me ON me.project_id = p.id AND me.user_id=%s
                ORDER BY p.name
                """,
                (TaskStatus.DONE.value, int(user_id)),
            )
            return [_row_to_project(r) for r in fetchall(cur)]

    def projects_with_hours(self, user_id: int) -> Sequence[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.id, p.name, p.description, p.client_name, p.manager_id, p.start_date, p.end_date,
                       p.status, m.name AS manager_name,
                       (SELECT COALESCE(SUM(te.hours), 0)
                        FROM timesheet_entry te JOIN timesheet ts ON ts.id = te.timesheet_id
                        WHERE te.project_id = p.id AND ts.user_id = %s) AS logged_hours
                FROM project p
                LEFT JOIN user_account m ON m.id = p.manager_id
                WHERE EXISTS (SELECT 1 FROM project_member pm WHERE pm.project_id = p.id AND pm.user_id = %s)
                   OR EXISTS (SELECT 1 FROM timesheet_entry te JOIN timesheet ts ON ts.id = te.timesheet_id
                              WHERE te.project_id = p.id AND ts.user_id = %s)
                ORDER BY p.name
                """,
                (int(user_id), int(user_id), int(user_id)),
            )
            return [_row_to_project(r) for r in fetchall(cur)]
