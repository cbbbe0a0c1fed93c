from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.hr_hub.hr_hub.attendance.model import AttendanceRecord
from src.hr_hub.hr_hub.core.enums import AttendanceStatus, RegularizationType, RequestStatus, ReviewAction
from src.hr_hub.hr_hub.core.exceptions import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from src.hr_hub.hr_hub.regularizations.model import RegularizationRequest
from src.hr_hub.hr_hub.regularizations.service import RegularizationService

DAY = date(2026, 3, 2)


class InMemoryUnitOfWork:
    def __init__(self, store: "InMemoryRegularizations"):
        self._s = store

    def lock_user(self, user_id: int) -> bool:
        return user_id in self._s.user_ids

    def find_pending(self, *, user_id, work_date, type):
        for r in self._s.requests.values():
            if (r.user_id, r.work_date, r.type, r.status) == (user_id, work_date, type, RequestStatus.PENDING):
                return r
        return None

    def insert(self, *, user_id, work_date, type, proposed_time, reason) -> int:
        self._s.next_id += 1
        self._s.requests[self._s.next_id] = RegularizationRequest(
            request_id=self._s.next_id,
            user_id=user_id,
            work_date=work_date,
            type=type,
            proposed_time=proposed_time,
            reason=reason,
            status=RequestStatus.PENDING,
            created_at=datetime(2026, 3, 3, 10, 0),
        )
        return self._s.next_id

    def get(self, request_id: int) -> Optional[RegularizationRequest]:
        return self._s.requests.get(request_id)

    lock_request = get

    def lock_attendance(self, *, user_id, work_date) -> Optional[AttendanceRecord]:
        return self._s.attendance.get((user_id, work_date))

    def write_attendance(self, *, user_id, work_date, status, check_in_at, check_out_at) -> None:
        self._s.attendance[(user_id, work_date)] = AttendanceRecord(
            attendance_id=1,
            user_id=user_id,
            work_date=work_date,
            status=status,
            check_in_at=check_in_at,
            check_out_at=check_out_at,
        )

    def mark_decided(self, *, request_id, status, reviewed_by, review_comment) -> bool:
        self._s.requests[request_id] = replace(
            self._s.requests[request_id],
            status=status,
            reviewed_by=reviewed_by,
            reviewed_at=datetime(2026, 3, 3, 12, 0),
            review_comment=review_comment,
        )
        return True


class InMemoryRegularizations:
    """Commits on clean exit, restores the snapshot when the block raises."""

    def __init__(self, *user_ids: int):
        self.user_ids = set(user_ids or (1,))
        self.requests: dict[int, RegularizationRequest] = {}
        self.attendance: dict[tuple[int, date], AttendanceRecord] = {}
        self.next_id = 0

    @contextmanager
    def transaction(self):
        snapshot = (dict(self.requests), dict(self.attendance), self.next_id)
        try:
            yield InMemoryUnitOfWork(self)
        except Exception:
            self.requests, self.attendance, self.next_id = snapshot
            raise

    def get(self, request_id: int):
        return self.requests.get(request_id)

    def list_requests(self, *, status=None, user_id=None, limit=200):
        rows = [
            r
            for r in self.requests.values()
            if (status is None or r.status == status) and (user_id is None or r.user_id == user_id)
        ]
        return rows[:limit]


def _create(svc, type=RegularizationType.CHECK_IN, at=time(9, 0), user_id=1):
    return svc.create(user_id=user_id, work_date=DAY, type=type, proposed_time=at, reason="Forgot to clock")


def test_duplicate_pending_request_conflicts():
    svc = RegularizationService(InMemoryRegularizations())
    _create(svc)

    with pytest.raises(ConflictError):
        _create(svc)


def test_other_type_on_same_day_is_allowed():
    store = InMemoryRegularizations()
    svc = RegularizationService(store)
    _create(svc)
    _create(svc, type=RegularizationType.CHECK_OUT, at=time(17, 0))

    assert len(store.requests) == 2


def test_new_request_allowed_after_decision():
    svc = RegularizationService(InMemoryRegularizations())
    first = _create(svc)
    svc.decide(request_id=first.request_id, action=ReviewAction.REJECT, reviewer_id=9)

    second = _create(svc)

    assert second.status == RequestStatus.PENDING
    assert second.request_id != first.request_id


def test_reason_length_enforced():
    svc = RegularizationService(InMemoryRegularizations())
    with pytest.raises(ValidationError):
        svc.create(user_id=1, work_date=DAY, type=RegularizationType.CHECK_IN, proposed_time=time(9, 0), reason=" abc ")


def test_unknown_user_is_not_found():
    svc = RegularizationService(InMemoryRegularizations(1))
    with pytest.raises(NotFoundError):
        _create(svc, user_id=42)


def test_approve_check_in_creates_present_attendance():
    store = InMemoryRegularizations()
    svc = RegularizationService(store)
    req = _create(svc, at=time(8, 45))

    decided = svc.decide(request_id=req.request_id, action=ReviewAction.APPROVE, reviewer_id=9, comment=" ok ")

    assert decided.status == RequestStatus.APPROVED
    assert decided.reviewed_by == 9
    assert decided.review_comment == "ok"
    record = store.attendance[(1, DAY)]
    assert record.status == AttendanceStatus.PRESENT
    assert record.check_in_at == datetime(2026, 3, 2, 8, 45)


def test_approve_check_out_keeps_existing_check_in():
    store = InMemoryRegularizations()
    store.attendance[(1, DAY)] = AttendanceRecord(
        attendance_id=1,
        user_id=1,
        work_date=DAY,
        status=AttendanceStatus.PRESENT,
        check_in_at=datetime(2026, 3, 2, 9, 0),
    )
    svc = RegularizationService(store)
    req = _create(svc, type=RegularizationType.CHECK_OUT, at=time(18, 0))

    svc.decide(request_id=req.request_id, action=ReviewAction.APPROVE, reviewer_id=9)

    record = store.attendance[(1, DAY)]
    assert record.check_in_at == datetime(2026, 3, 2, 9, 0)
    assert record.check_out_at == datetime(2026, 3, 2, 18, 0)


def test_approve_check_out_without_check_in_rolls_back():
    store = InMemoryRegularizations()
    svc = RegularizationService(store)
    req = _create(svc, type=RegularizationType.CHECK_OUT, at=time(18, 0))

    with pytest.raises(ValidationError):
        svc.decide(request_id=req.request_id, action=ReviewAction.APPROVE, reviewer_id=9)

    assert store.requests[req.request_id].status == RequestStatus.PENDING
    assert (1, DAY) not in store.attendance


def test_reject_leaves_attendance_untouched():
    store = InMemoryRegularizations()
    svc = RegularizationService(store)
    req = _create(svc)

    decided = svc.decide(request_id=req.request_id, action=ReviewAction.REJECT, reviewer_id=9, comment="no")

    assert decided.status == RequestStatus.REJECTED
    assert store.attendance == {}


def test_decided_request_cannot_be_decided_again():
    svc = RegularizationService(InMemoryRegularizations())
    req = _create(svc)
    svc.decide(request_id=req.request_id, action=ReviewAction.APPROVE, reviewer_id=9)

    with pytest.raises(InvalidTransitionError, match="Request already approved"):
        svc.decide(request_id=req.request_id, action=ReviewAction.REJECT, reviewer_id=9)


def test_decide_unknown_request():
    svc = RegularizationService(InMemoryRegularizations())
    with pytest.raises(NotFoundError):
        svc.decide(request_id=404, action=ReviewAction.APPROVE, reviewer_id=9)


def test_pending_lists_only_pending():
    svc = RegularizationService(InMemoryRegularizations())
    a = _create(svc)
    _create(svc, type=RegularizationType.CHECK_OUT, at=time(17, 0))
    svc.decide(request_id=a.request_id, action=ReviewAction.REJECT, reviewer_id=9)

    assert [r.type for r in svc.pending()] == [RegularizationType.CHECK_OUT]
    assert len(svc.mine(1)) == 2
