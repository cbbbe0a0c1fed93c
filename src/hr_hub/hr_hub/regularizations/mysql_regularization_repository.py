from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, time
from typing import Any, Dict, Iterator, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.mysql_attendance_repository import row_to_record
from ..core.enums import AttendanceStatus, RegularizationType, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, as_time
from .model import RegularizationRequest
from .repository import RegularizationRepository, RegularizationUnitOfWork

_SELECT = """
    SELECT ar.id, ar.user_id, ar.work_date, ar.type, ar.proposed_time, ar.reason, ar.status,
           ar.created_at, ar.reviewed_by, ar.reviewed_at, ar.review_comment,
           ua.name AS user_name, ua.email
    FROM attendance_regularization ar
    JOIN user_account ua ON ua.id = ar.user_id
"""


def _row_to_request(row: Dict[str, Any]) -> RegularizationRequest:
    return RegularizationRequest(
        request_id=int(row["id"]),
        user_id=int(row["user_id"]),
        work_date=row["work_date"],
        type=RegularizationType(row["type"]),
        proposed_time=as_time(row["proposed_time"]),
        reason=row["reason"],
        status=RequestStatus(row["status"]),
        created_at=row["created_at"],
        reviewed_by=int(row["reviewed_by"]) if row.get("reviewed_by") else None,
        reviewed_at=row.get("reviewed_at"),
        review_comment=row.get("review_comment"),
        user_name=row.get("user_name"),
        email=row.get("email"),
    )


class _MySQLRegularizationUnitOfWork(RegularizationUnitOfWork):
    def __init__(self, cur):
        self._cur = cur

    def lock_user(self, user_id: int) -> bool:
        self._cur.execute("SELECT id FROM user_account WHERE id=%s FOR UPDATE", (int(user_id),))
        return fetchone(self._cur) is not None

    def find_pending(
        self, *, user_id: int, work_date: date, type: RegularizationType
    ) -> Optional[RegularizationRequest]:
        self._cur.execute(
            _SELECT + " WHERE ar.user_id=%s AND ar.work_date=%s AND ar.type=%s AND ar.status=%s LIMIT 1",
            (int(user_id), work_date, type.value, RequestStatus.PENDING.value),
        )
        row = fetchone(self._cur)
        return _row_to_request(row) if row else None

    def insert(
        self,
        *,
        user_id: int,
        work_date: date,
        type: RegularizationType,
        proposed_time: time,
        reason: str,
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO attendance_regularization (user_id, work_date, type, proposed_time, reason, status)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            (int(user_id), work_date, type.value, proposed_time, reason, RequestStatus.PENDING.value),
        )
        return int(self._cur.lastrowid)

    def get(self, request_id: int) -> Optional[RegularizationRequest]:
        self._cur.execute(_SELECT + " WHERE ar.id=%s", (int(request_id),))
        row = fetchone(self._cur)
        return _row_to_request(row) if row else None

    def lock_request(self, request_id: int) -> Optional[RegularizationRequest]:
        self._cur.execute(_SELECT + " WHERE ar.id=%s FOR UPDATE", (int(request_id),))
        row = fetchone(self._cur)
        return _row_to_request(row) if row else None

    def lock_attendance(self, *, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        # Materialize the day first: a FOR UPDATE miss would only take a gap lock,
        # and two approvals for the same empty day would deadlock on their inserts.
        self._cur.execute(
            """
            INSERT INTO attendance (user_id, work_date, status) VALUES (%s, %s, %s)
            ON DUPLICATE KEY UPDATE id=id
            """,
            (int(user_id), work_date, AttendanceStatus.NOT_CHECKED_IN.value),
        )
        self._cur.execute(
            """
            SELECT id, user_id, work_date, status, check_in_at, check_out_at, updated_at
            FROM attendance WHERE user_id=%s AND work_date=%s FOR UPDATE
            """,
            (int(user_id), work_date),
        )
        row = fetchone(self._cur)
        return row_to_record(row) if row else None

    def write_attendance(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in_at: Optional[datetime],
        check_out_at: Optional[datetime],
    ) -> None:
        self._cur.execute(
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

    def mark_decided(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        review_comment: Optional[str],
    ) -> bool:
        self._cur.execute(
            """
            UPDATE attendance_regularization
            SET status=%s, reviewed_by=%s, reviewed_at=NOW(), review_comment=%s
            WHERE id=%s AND status=%s
            """,
            (status.value, int(reviewed_by), review_comment, int(request_id), RequestStatus.PENDING.value),
        )
        return self._cur.rowcount > 0


class MySQLRegularizationRepository(RegularizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[RegularizationUnitOfWork]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield _MySQLRegularizationUnitOfWork(cur)

    def get(self, request_id: int) -> Optional[RegularizationRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _MySQLRegularizationUnitOfWork(cur).get(request_id)

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[RegularizationRequest]:
        where = ["1=1"]
        params: list[Any] = []
        if status is not None:
            where.append("ar.status=%s")
            params.append(status.value)
        if user_id is not None:
            where.append("ar.user_id=%s")
            params.append(int(user_id))
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {' AND '.join(where)} ORDER BY ar.created_at DESC, ar.id DESC LIMIT %s",
                tuple(params),
            )
            return [_row_to_request(r) for r in fetchall(cur)]
