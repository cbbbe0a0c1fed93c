from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..approvals import gate
from ..common.datetime_utils import week_bounds
from ..core.constants import MAX_ENTRY_HOURS
from ..core.enums import ReviewAction, TimesheetStatus
from ..core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from .model import NewTimesheetEntry, Timesheet
from .repository import TimesheetRepository, TimesheetWeekLock

logger = logging.getLogger(__name__)


class TimesheetService:
    def __init__(self, timesheets: TimesheetRepository):
        self._timesheets = timesheets

    def get_week(self, *, user_id: int, week_start: date) -> Timesheet:
        found = self._timesheets.get_week(user_id=int(user_id), week_start=week_start)
        if found:
            return found
        return Timesheet(
            timesheet_id=None,
            user_id=int(user_id),
            week_start_date=week_start,
            status=TimesheetStatus.DRAFT,
        )

    def save_week(self, *, user_id: int, week_start: date, entries: Sequence[NewTimesheetEntry]) -> Timesheet:
        with self._timesheets.lock_week(user_id=int(user_id), week_start=week_start) as week:
            status = week.timesheet.status
            gate.ensure_can_mutate(status)
            if status == TimesheetStatus.REJECTED:
                week.set_status(TimesheetStatus.DRAFT)

            self._validate_entries(week, week_start, entries)
            week.clear_entries()
            week.insert_entries(list(entries))

        logger.info("Timesheet %s/%s saved with %d entries", user_id, week_start, len(entries))
        return self.get_week(user_id=user_id, week_start=week_start)

    @staticmethod
    def _validate_entries(week: TimesheetWeekLock, week_start: date, entries: Sequence[NewTimesheetEntry]) -> None:
        first, last = week_bounds(week_start)
        for e in entries:
            if not first <= e.work_date <= last:
                raise ValidationError(f"Entry date {e.work_date:%Y-%m-%d} is outside the week starting {week_start:%Y-%m-%d}")
            if not 0 < float(e.hours) <= MAX_ENTRY_HOURS:
                raise ValidationError(f"Hours must be greater than 0 and at most {MAX_ENTRY_HOURS}")

        # one lookup per table for the whole batch
        projects = week.existing_projects(e.project_id for e in entries)
        tasks = week.task_projects(e.task_id for e in entries if e.task_id is not None)
        for e in entries:
            if e.project_id not in projects:
                raise ValidationError(f"Project {e.project_id} not found")
            if e.task_id is not None:
                if e.task_id not in tasks:
                    raise ValidationError(f"Task {e.task_id} not found")
                if tasks[e.task_id] != e.project_id:
                    raise ValidationError(f"Task {e.task_id} does not belong to project {e.project_id}")

    def submit_week(self, *, user_id: int, week_start: date) -> Timesheet:
        submitted = self._timesheets.submit(
            user_id=int(user_id),
            week_start=week_start,
            from_statuses=gate.SUBMITTABLE_STATUSES,
        )
        if not submitted:
            current = self._timesheets.get_week(user_id=int(user_id), week_start=week_start)
            if not current:
                raise InvalidTransitionError("missing", TimesheetStatus.SUBMITTED.value, "Timesheet not found")
            gate.ensure_can_submit(current.status)
            # submittable again by the time it was re-read
            raise InvalidTransitionError(
                current.status.value, TimesheetStatus.SUBMITTED.value, "Timesheet was modified concurrently"
            )
        logger.info("Timesheet %s/%s submitted", user_id, week_start)
        return self.get_week(user_id=user_id, week_start=week_start)

    def review_week(
        self,
        *,
        timesheet_id: int,
        action: ReviewAction,
        reviewer_id: int,
        reason: Optional[str] = None,
    ) -> Timesheet:
        current = self._timesheets.get_by_id(int(timesheet_id))
        if not current:
            raise NotFoundError("Timesheet not found")
        gate.ensure_can_review(current.status, action)

        outcome = gate.review_outcome(current.status, action)
        reviewed = self._timesheets.review(
            timesheet_id=int(timesheet_id),
            outcome=outcome,
            reviewer_id=int(reviewer_id),
            reason=(reason or "").strip() or None,
        )
        if not reviewed:
            # another reviewer got there first
            latest = self._timesheets.get_by_id(int(timesheet_id))
            gate.ensure_can_review(latest.status if latest else current.status, action)
            raise InvalidTransitionError(current.status.value, outcome.value, "Timesheet was modified concurrently")

        logger.info("Timesheet %s %s by user %s", timesheet_id, outcome.value, reviewer_id)
        return self._timesheets.get_by_id(int(timesheet_id))

    def delete_entry(self, *, entry_id: int, user_id: int) -> None:
        owner = self._timesheets.get_entry_ownership(int(entry_id))
        if not owner or owner.user_id != int(user_id):
            raise NotFoundError("Timesheet entry not found")
        if owner.status == TimesheetStatus.APPROVED:
            raise InvalidTransitionError(owner.status.value, owner.status.value, "Cannot delete entries from approved timesheet")
        if not self._timesheets.delete_entry(entry_id=int(entry_id), user_id=int(user_id)):
            raise InvalidTransitionError(
                TimesheetStatus.APPROVED.value,
                TimesheetStatus.APPROVED.value,
                "Cannot delete entries from approved timesheet",
            )

    def approval_queue(self):
        return self._timesheets.list_by_status(TimesheetStatus.SUBMITTED)

    def employee_timesheets(self, employee_id: int):
        return self._timesheets.list_for_user(int(employee_id))

    def task_logs(self, task_id: int):
        return self._timesheets.entries_for_task(int(task_id))

    def entries_for_date(self, *, user_id: int, work_date: date):
        return self._timesheets.entries_for_date(user_id=int(user_id), work_date=work_date)
