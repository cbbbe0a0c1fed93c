"""Status guards shared by the timesheet and regularization workflows.

Allowed transitions:
- timesheet: draft|rejected -> submitted -> approved|rejected
- regularization: pending -> approved|rejected (both terminal)

The status sets are also used as parameters of conditional UPDATE statements
(``WHERE status IN (...)``) so the SQL and the Python guard never disagree.
"""

from __future__ import annotations

from typing import Union

from ..core.enums import RequestStatus, ReviewAction, TimesheetStatus
from ..core.exceptions import InvalidTransitionError

MUTABLE_STATUSES = frozenset({TimesheetStatus.DRAFT, TimesheetStatus.REJECTED})
SUBMITTABLE_STATUSES = frozenset({TimesheetStatus.DRAFT, TimesheetStatus.REJECTED})
REVIEWABLE_TIMESHEET_STATUS = TimesheetStatus.SUBMITTED
REVIEWABLE_REQUEST_STATUS = RequestStatus.PENDING

ReviewableStatus = Union[TimesheetStatus, RequestStatus]


def can_mutate(status: TimesheetStatus) -> bool:
    return status in MUTABLE_STATUSES


def can_submit(status: TimesheetStatus) -> bool:
    return status in SUBMITTABLE_STATUSES


def can_review(status: ReviewableStatus) -> bool:
    if isinstance(status, RequestStatus):
        return status == REVIEWABLE_REQUEST_STATUS
    return status == REVIEWABLE_TIMESHEET_STATUS


def review_outcome(status: ReviewableStatus, action: ReviewAction) -> ReviewableStatus:
    """Terminal status reached by applying a reviewer's action."""
    if isinstance(status, RequestStatus):
        return RequestStatus.APPROVED if action == ReviewAction.APPROVE else RequestStatus.REJECTED
    return TimesheetStatus.APPROVED if action == ReviewAction.APPROVE else TimesheetStatus.REJECTED


def ensure_can_mutate(status: TimesheetStatus) -> None:
    if can_mutate(status):
        return
    raise InvalidTransitionError(
        status.value,
        TimesheetStatus.DRAFT.value,
        f"Cannot modify {status.value} timesheet",
    )


def ensure_can_submit(status: TimesheetStatus) -> None:
    if not can_submit(status):
        raise InvalidTransitionError(
            status.value,
            TimesheetStatus.SUBMITTED.value,
            f"Cannot submit {status.value} timesheet",
        )


def ensure_can_review(status: ReviewableStatus, action: ReviewAction) -> None:
    if can_review(status):
        return
    target = review_outcome(status, action)
    if isinstance(status, RequestStatus):
        reason = f"Request already {status.value}"
    else:
        reason = f"Only submitted timesheets can be reviewed (current: {status.value})"
    raise InvalidTransitionError(status.value, target.value, reason)
