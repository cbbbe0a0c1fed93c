from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import AbstractSet, Any, Dict, Iterable, Iterator, Optional, Sequence

from ..core.enums import TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import EntryOwnership, NewTimesheetEntry, Timesheet, TimesheetEntry
from .repository import TimesheetRepository, TimesheetWeekLock

_TIMESHEET_COLUMNS = """
    ts.id, ts.user_id, ts.week_start_date, ts.status, ts.submitted_at, ts.approved_at, ts.approved_by,
    ts.rejected_at, ts.rejected_by, ts.rejection_reason
"""

_ENTRY_SELECT = """
    SELECT te.id, te.timesheet_id, te.project_id, te.task_id, te.work_date, te.hours, te.note,
           p.name AS project_name, t.title AS task_title, ts.user_id, ua.name AS user_name
    FROM timesheet_entry te
    JOIN timesheet ts ON ts.id = te.timesheet_id
    JOIN user_account ua ON ua.id = ts.user_id
    JOIN project p ON p.id = te.project_id
    LEFT JOIN task t ON t.id = te.task_id
"""


def _row_to_timesheet(row: Dict[str, Any], *, entries: Sequence[TimesheetEntry] = ()) -> Timesheet:
    total = row.get("total_hours")
    if total is None:
        total = sum(e.hours for e in entries)
    return Timesheet(
        timesheet_id=int(row["id"]),
        user_id=int(row["user_id"]),
        week_start_date=row["week_start_date"],
        status=TimesheetStatus(row["status"]),
        entries=tuple(entries),
        total_hours=float(total or 0),
        submitted_at=row.get("submitted_at"),
        approved_at=row.get("approved_at"),
        approved_by=row.get("approved_by"),
        rejected_at=row.get("rejected_at"),
        rejected_by=row.get("rejected_by"),
        rejection_reason=row.get("rejection_reason"),
        user_name=row.get("user_name"),
        email=row.get("email"),
    )


def _row_to_entry(row: Dict[str, Any]) -> TimesheetEntry:
    return TimesheetEntry(
        entry_id=int(row["id"]),
        timesheet_id=int(row["timesheet_id"]),
        project_id=int(row["project_id"]),
        task_id=int(row["task_id"]) if row.get("task_id") else None,
        work_date=row["work_date"],
        hours=float(row["hours"]),
        note=row.get("note"),
        project_name=row.get("project_name"),
        task_title=row.get("task_title"),
        user_id=int(row["user_id"]) if row.get("user_id") else None,
        user_name=row.get("user_name"),
    )


def _load_entries(cur, timesheet_id: int) -> list[TimesheetEntry]:
    cur.execute(_ENTRY_SELECT + " WHERE te.timesheet_id=%s ORDER BY te.work_date, te.id", (int(timesheet_id),))
    return [_row_to_entry(r) for r in fetchall(cur)]


class _MySQLTimesheetWeekLock(TimesheetWeekLock):
    def __init__(self, cur, timesheet: Timesheet):
        self._cur = cur
        self.timesheet = timesheet

    def set_status(self, status: TimesheetStatus) -> None:
        self._cur.execute(
            "UPDATE timesheet SET status=%s, updated_at=NOW() WHERE id=%s",
            (status.value, self.timesheet.timesheet_id),
        )

    def clear_entries(self) -> None:
        self._cur.execute("DELETE FROM timesheet_entry WHERE timesheet_id=%s", (self.timesheet.timesheet_id,))

    def existing_projects(self, project_ids: Iterable[int]) -> AbstractSet[int]:
        ids = sorted({int(p) for p in project_ids})
        if not ids:
            return frozenset()
        placeholders, params = in_clause(ids)
        self._cur.execute(f"SELECT id FROM project WHERE id IN ({placeholders})", params)
        return frozenset(int(r["id"]) for r in fetchall(self._cur))

    def task_projects(self, task_ids: Iterable[int]) -> Dict[int, int]:
        ids = sorted({int(t) for t in task_ids})
        if not ids:
            return {}
        placeholders, params = in_clause(ids)
        self._cur.execute(f"SELECT id, project_id FROM task WHERE id IN ({placeholders})", params)
        return {int(r["id"]): int(r["project_id"]) for r in fetchall(self._cur)}

    def insert_entries(self, entries: Sequence[NewTimesheetEntry]) -> None:
        if not entries:
            return
        self._cur.executemany(
            """
            INSERT INTO timesheet_entry (timesheet_id, project_id, task_id, work_date, hours, note)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            [
                (self.timesheet.timesheet_id, e.project_id, e.task_id, e.work_date, e.hours, e.note)
                for e in entries
            ],
        )


class MySQLTimesheetRepository(TimesheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_week(self, *, user_id: int, week_start: date) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TIMESHEET_COLUMNS} FROM timesheet ts WHERE ts.user_id=%s AND ts.week_start_date=%s",
                (int(user_id), week_start),
            )
            row = fetchone(cur)
            if not row:
                return None
            return _row_to_timesheet(row, entries=_load_entries(cur, row["id"]))

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TIMESHEET_COLUMNS}, ua.name AS user_name, ua.email
                FROM timesheet ts JOIN user_account ua ON ua.id = ts.user_id
                WHERE ts.id=%s
                """,
                (int(timesheet_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return _row_to_timesheet(row, entries=_load_entries(cur, row["id"]))

    @contextmanager
    def lock_week(self, *, user_id: int, week_start: date) -> Iterator[TimesheetWeekLock]:
        params = (int(user_id), week_start)

        with db_cursor(self._conn_factory) as (_, cur):
            # Insert first so concurrent first saves queue on the unique key row
            # instead of both holding a gap lock from a FOR UPDATE miss.
            cur.execute(
                """
                INSERT INTO timesheet (user_id, week_start_date, status) VALUES (%s, %s, %s)
                ON DUPLICATE KEY UPDATE id=id
                """,
                (*params, TimesheetStatus.DRAFT.value),
            )
            cur.execute(
                f"SELECT {_TIMESHEET_COLUMNS} FROM timesheet ts WHERE ts.user_id=%s AND ts.week_start_date=%s FOR UPDATE",
                params,
            )
            yield _MySQLTimesheetWeekLock(cur, _row_to_timesheet(fetchone(cur)))

    def submit(self, *, user_id: int, week_start: date, from_statuses: AbstractSet[TimesheetStatus]) -> bool:
        placeholders, status_params = in_clause(sorted(s.value for s in from_statuses))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE timesheet
                SET status=%s, submitted_at=NOW(), updated_at=NOW()
                WHERE user_id=%s AND week_start_date=%s AND status IN ({placeholders})
                """,
                (TimesheetStatus.SUBMITTED.value, int(user_id), week_start, *status_params),
            )
            return cur.rowcount > 0

    def review(
        self,
        *,
        timesheet_id: int,
        outcome: TimesheetStatus,
        reviewer_id: int,
        reason: Optional[str] = None,
    ) -> bool:
        if outcome == TimesheetStatus.APPROVED:
            sql = """
                UPDATE timesheet
                SET status=%s, approved_at=NOW(), approved_by=%s,
                    rejected_at=NULL, rejected_by=NULL, rejection_reason=NULL, updated_at=NOW()
                WHERE id=%s AND status=%s
            """
            params: tuple = (outcome.value, int(reviewer_id), int(timesheet_id), TimesheetStatus.SUBMITTED.value)
        else:
            sql = """
                UPDATE timesheet
                SET status=%s, rejected_at=NOW(), rejected_by=%s, rejection_reason=%s,
                    approved_at=NULL, approved_by=NULL, updated_at=NOW()
                WHERE id=%s AND status=%s
            """
            params = (outcome.value, int(reviewer_id), reason, int(timesheet_id), TimesheetStatus.SUBMITTED.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

    def get_entry_ownership(self, entry_id: int) -> Optional[EntryOwnership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT te.id, te.timesheet_id, ts.user_id, ts.status
                FROM timesheet_entry te JOIN timesheet ts ON ts.id = te.timesheet_id
                WHERE te.id=%s
                """,
                (int(entry_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return EntryOwnership(
                entry_id=int(row["id"]),
                timesheet_id=int(row["timesheet_id"]),
                user_id=int(row["user_id"]),
                status=TimesheetStatus(row["status"]),
            )

    def delete_entry(self, *, entry_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE te FROM timesheet_entry te
                JOIN timesheet ts ON ts.id = te.timesheet_id
                WHERE te.id=%s AND ts.user_id=%s AND ts.status <> %s
                """,
                (int(entry_id), int(user_id), TimesheetStatus.APPROVED.value),
            )
            return cur.rowcount > 0

    def _list(self, where: str, params: tuple, order: str) -> Sequence[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_TIMESHEET_COLUMNS}, ua.name AS user_name, ua.email,
                       COALESCE(SUM(te.hours), 0) AS total_hours
                FROM timesheet ts
                JOIN user_account ua ON ua.id = ts.user_id
                LEFT JOIN timesheet_entry te ON te.timesheet_id = ts.id
                WHERE {where}
                GROUP BY ts.id, ua.name, ua.email
                ORDER BY {order}
                """,
                params,
            )
            return [_row_to_timesheet(r) for r in fetchall(cur)]

    def list_by_status(self, status: TimesheetStatus) -> Sequence[Timesheet]:
        return self._list("ts.status=%s", (status.value,), "ts.submitted_at ASC, ts.id ASC")

    def list_for_user(self, user_id: int) -> Sequence[Timesheet]:
        return self._list("ts.user_id=%s", (int(user_id),), "ts.week_start_date DESC")

    def entries_for_task(self, task_id: int) -> Sequence[TimesheetEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_ENTRY_SELECT + " WHERE te.task_id=%s ORDER BY te.work_date DESC, te.id DESC", (int(task_id),))
            return [_row_to_entry(r) for r in fetchall(cur)]

    def entries_for_date(self, *, user_id: int, work_date: date) -> Sequence[TimesheetEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _ENTRY_SELECT + " WHERE ts.user_id=%s AND te.work_date=%s ORDER BY te.id",
                (int(user_id), work_date),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]
