from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..users.model import default_employee_code
from .model import AttendanceRecord, TeamAttendanceRow
from .repository import AttendanceRepository

_COLUMNS = "id, user_id, work_date, status, check_in_at, check_out_at, updated_at"


def row_to_record(row: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(row["id"]),
        user_id=int(row["user_id"]),
        work_date=row["work_date"],
        status=AttendanceStatus(row["status"]),
        check_in_at=row.get("check_in_at"),
        check_out_at=row.get("check_out_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE user_id=%s AND work_date=%s",
                (int(user_id), work_date),
            )
            row = fetchone(cur)
            return row_to_record(row) if row else None

    def upsert_check_in(self, *, user_id: int, work_date: date, check_in_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance (user_id, work_date, status, check_in_at)
                VALUES (%s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    check_in_at = COALESCE(check_in_at, VALUES(check_in_at)),
                    status = VALUES(status),
                    updated_at = NOW()
                """,
                (int(user_id), work_date, AttendanceStatus.PRESENT.value, check_in_at),
            )

    def mark_check_out(self, *, user_id: int, work_date: date, check_out_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_out_at=%s, updated_at=NOW()
                WHERE user_id=%s AND work_date=%s
                  AND check_in_at IS NOT NULL
                  AND check_out_at IS NULL
                  AND check_in_at <= %s
                """,
                (check_out_at, int(user_id), work_date, check_out_at),
            )
            return cur.rowcount > 0

    def manager_upsert(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in_at: Optional[datetime],
        check_out_at: Optional[datetime],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance (user_id, work_date, status, check_in_at, check_out_at)
                VALUES (%s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    status = VALUES(status),
                    check_in_at = VALUES(check_in_at),
                    check_out_at = VALUES(check_out_at),
                    updated_at = NOW()
                """,
                (int(user_id), work_date, status.value, check_in_at, check_out_at),
            )

    def list_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        newest_first: bool = False,
    ) -> Sequence[AttendanceRecord]:
        where = ["user_id=%s"]
        params: list[Any] = [int(user_id)]
        if start_date:
            where.append("work_date >= %s")
            params.append(start_date)
        if end_date:
            where.append("work_date <= %s")
            params.append(end_date)
        order = "DESC" if newest_first else "ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE {' AND '.join(where)} ORDER BY work_date {order}",
                tuple(params),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def team_for_date(self, work_date: date) -> Sequence[TeamAttendanceRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ua.id AS user_id, ua.employee_code, ua.name AS user_name, ua.email, ua.department,
                       a.id AS attendance_id, a.status, a.check_in_at, a.check_out_at
                FROM user_account ua
                LEFT JOIN attendance a ON a.user_id = ua.id AND a.work_date = %s
                WHERE ua.is_active = 1
                ORDER BY ua.name
                """,
                (work_date,),
            )
            out: list[TeamAttendanceRow] = []
            for r in fetchall(cur):
                code = (r.get("employee_code") or "").strip()
                out.append(
                    TeamAttendanceRow(
                        user_id=int(r["user_id"]),
                        employee_code=code or default_employee_code(r["user_id"]),
                        user_name=r["user_name"],
                        email=r["email"],
                        department=r.get("department"),
                        work_date=work_date,
                        # no row for the day means the user never showed up
                        status=AttendanceStatus(r["status"]) if r.get("status") else AttendanceStatus.ABSENT,
                        check_in_at=r.get("check_in_at"),
                        check_out_at=r.get("check_out_at"),
                        attendance_id=int(r["attendance_id"]) if r.get("attendance_id") else None,
                    )
                )
            return out
