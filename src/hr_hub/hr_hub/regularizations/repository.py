from __future__ import annotations

from datetime import date, datetime, time
from typing import ContextManager, Optional, Protocol, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus, RegularizationType, RequestStatus
from .model import RegularizationRequest


class RegularizationUnitOfWork(Protocol):
    """Operations that share one DB transaction (and its row locks)."""

    def lock_user(self, user_id: int) -> bool:
        raise NotImplementedError

    def find_pending(
        self, *, user_id: int, work_date: date, type: RegularizationType
    ) -> Optional[RegularizationRequest]:
        raise NotImplementedError

    def insert(
        self,
        *,
        user_id: int,
        work_date: date,
        type: RegularizationType,
        proposed_time: time,
        reason: str,
    ) -> int:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[RegularizationRequest]:
        raise NotImplementedError

    def lock_request(self, request_id: int) -> Optional[RegularizationRequest]:
        raise NotImplementedError

    def lock_attendance(self, *, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def write_attendance(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in_at: Optional[datetime],
        check_out_at: Optional[datetime],
    ) -> None:
        raise NotImplementedError

    def mark_decided(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        review_comment: Optional[str],
    ) -> bool:
        raise NotImplementedError


class RegularizationRepository(Protocol):
    def transaction(self) -> ContextManager[RegularizationUnitOfWork]:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[RegularizationRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        *,
        status: Optional[RequestStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[RegularizationRequest]:
        raise NotImplementedError
