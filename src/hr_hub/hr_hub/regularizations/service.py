from __future__ import annotations

import logging
from datetime import date, time
from typing import Optional

from ..approvals import gate
from ..core.enums import AttendanceStatus, RegularizationType, RequestStatus, ReviewAction
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import RegularizationRequest
from .repository import RegularizationRepository, RegularizationUnitOfWork

logger = logging.getLogger(__name__)

REASON_MIN_LENGTH = 5
REASON_MAX_LENGTH = 500


class RegularizationService:
    def __init__(self, requests: RegularizationRepository):
        self._requests = requests

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        type: RegularizationType,
        proposed_time: time,
        reason: str,
    ) -> RegularizationRequest:
        reason = (reason or "").strip()
        if not REASON_MIN_LENGTH <= len(reason) <= REASON_MAX_LENGTH:
            raise ValidationError(f"Reason must be {REASON_MIN_LENGTH}-{REASON_MAX_LENGTH} characters")

        # The user row lock serializes concurrent submissions, so the pending
        # check and the insert cannot interleave.
        with self._requests.transaction() as tx:
            if not tx.lock_user(int(user_id)):
                raise NotFoundError("User not found")
            if tx.find_pending(user_id=int(user_id), work_date=work_date, type=type):
                raise ConflictError("Regularization already requested for this date and type")
            request_id = tx.insert(
                user_id=int(user_id),
                work_date=work_date,
                type=type,
                proposed_time=proposed_time,
                reason=reason,
            )
            created = tx.get(request_id)

        logger.info("Regularization %s (%s %s) requested by user %s", request_id, type.value, work_date, user_id)
        return created

    def decide(
        self,
        *,
        request_id: int,
        action: ReviewAction,
        reviewer_id: int,
        comment: Optional[str] = None,
    ) -> RegularizationRequest:
        with self._requests.transaction() as tx:
            req = tx.lock_request(int(request_id))
            if not req:
                raise NotFoundError("Request not found")
            gate.ensure_can_review(req.status, action)

            if action == ReviewAction.APPROVE:
                self._apply_to_attendance(tx, req)

            outcome = gate.review_outcome(req.status, action)
            tx.mark_decided(
                request_id=req.request_id,
                status=outcome,
                reviewed_by=int(reviewer_id),
                review_comment=(comment or "").strip() or None,
            )
            decided = tx.get(req.request_id)

        logger.info("Regularization %s %s by user %s", request_id, outcome.value, reviewer_id)
        return decided

    @staticmethod
    def _apply_to_attendance(tx: RegularizationUnitOfWork, req: RegularizationRequest) -> None:
        record = tx.lock_attendance(user_id=req.user_id, work_date=req.work_date)
        check_in_at = record.check_in_at if record else None
        check_out_at = record.check_out_at if record else None
        status = record.status if record else AttendanceStatus.PRESENT

        if req.type == RegularizationType.CHECK_IN:
            check_in_at = req.proposed_at
            status = AttendanceStatus.PRESENT
        else:
            if not check_in_at:
                raise ValidationError("Cannot apply a check-out correction to a day without check-in")
            check_out_at = req.proposed_at

        if check_in_at and check_out_at and check_out_at < check_in_at:
            raise ValidationError("Check-out time cannot be earlier than check-in time")

        tx.write_attendance(
            user_id=req.user_id,
            work_date=req.work_date,
            status=status,
            check_in_at=check_in_at,
            check_out_at=check_out_at,
        )

    def pending(self):
        return self._requests.list_requests(status=RequestStatus.PENDING)

    def mine(self, user_id: int):
        return self._requests.list_requests(user_id=int(user_id))
