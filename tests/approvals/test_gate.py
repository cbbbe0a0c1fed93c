import pytest

from src.hr_hub.hr_hub.approvals import gate
from src.hr_hub.hr_hub.core.enums import RequestStatus, ReviewAction, TimesheetStatus
from src.hr_hub.hr_hub.core.exceptions import InvalidTransitionError


@pytest.mark.parametrize(
    "status, mutable",
    [
        (TimesheetStatus.DRAFT, True),
        (TimesheetStatus.REJECTED, True),
        (TimesheetStatus.SUBMITTED, False),
        (TimesheetStatus.APPROVED, False),
    ],
)
def test_mutable_and_submittable_statuses(status, mutable):
    assert gate.can_mutate(status) is mutable
    assert gate.can_submit(status) is mutable


def test_only_submitted_timesheet_or_pending_request_is_reviewable():
    assert gate.can_review(TimesheetStatus.SUBMITTED)
    assert gate.can_review(RequestStatus.PENDING)
    assert not gate.can_review(TimesheetStatus.DRAFT)
    assert not gate.can_review(RequestStatus.APPROVED)


def test_review_outcome_keeps_the_workflow_type():
    assert gate.review_outcome(TimesheetStatus.SUBMITTED, ReviewAction.REJECT) == TimesheetStatus.REJECTED
    assert gate.review_outcome(RequestStatus.PENDING, ReviewAction.APPROVE) == RequestStatus.APPROVED


def test_ensure_can_mutate_reports_current_status():
    with pytest.raises(InvalidTransitionError) as exc:
        gate.ensure_can_mutate(TimesheetStatus.APPROVED)

    assert exc.value.from_status == "approved"
    assert str(exc.value) == "Cannot modify approved timesheet"


def test_ensure_can_submit_refuses_submitted():
    with pytest.raises(InvalidTransitionError, match="Cannot submit submitted timesheet"):
        gate.ensure_can_submit(TimesheetStatus.SUBMITTED)


def test_ensure_can_review_messages():
    with pytest.raises(InvalidTransitionError, match="Request already rejected"):
        gate.ensure_can_review(RequestStatus.REJECTED, ReviewAction.APPROVE)

    with pytest.raises(InvalidTransitionError) as exc:
        gate.ensure_can_review(TimesheetStatus.DRAFT, ReviewAction.APPROVE)
    assert exc.value.to_status == "approved"
    assert "current: draft" in str(exc.value)

    gate.ensure_can_review(TimesheetStatus.SUBMITTED, ReviewAction.REJECT)
