from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, TeamAttendanceRow


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_check_in(self, *, user_id: int, work_date: date, check_in_at: datetime) -> None:
        """Single-statement upsert that keeps an existing check_in_at."""
        raise NotImplementedError

    def mark_check_out(self, *, user_id: int, work_date: date, check_out_at: datetime) -> bool:
        """Set check_out_at only if checked in, not yet checked out and not before check-in."""
        raise NotImplementedError

    def manager_upsert(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in_at: Optional[datetime],
        check_out_at: Optional[datetime],
    ) -> None:
        raise NotImplementedError

    def list_for_user(
        self,
        *,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        newest_first: bool = False,
    ) -> Sequence[AttendanceRecord]:
        """Rows with start_date <= work_date <= end_date (bounds optional)."""
        raise NotImplementedError

    def team_for_date(self, work_date: date) -> Sequence[TeamAttendanceRow]:
        raise NotImplementedError
