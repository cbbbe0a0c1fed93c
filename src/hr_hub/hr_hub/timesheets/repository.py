from __future__ import annotations

from datetime import date
from typing import AbstractSet, ContextManager, Dict, Iterable, Optional, Protocol, Sequence

from ..core.enums import TimesheetStatus
from .model import EntryOwnership, NewTimesheetEntry, Timesheet, TimesheetEntry


class TimesheetWeekLock(Protocol):
    """A timesheet row held under an exclusive lock until the block exits.

    Every call runs in the same transaction; an exception rolls all of them back.
    """

    timesheet: Timesheet

    def set_status(self, status: TimesheetStatus) -> None:
        raise NotImplementedError

    def clear_entries(self) -> None:
        raise NotImplementedError

    def existing_projects(self, project_ids: Iterable[int]) -> AbstractSet[int]:
        raise NotImplementedError

    def task_projects(self, task_ids: Iterable[int]) -> Dict[int, int]:
        """Map task_id -> project_id for the tasks that exist."""
        raise NotImplementedError

    def insert_entries(self, entries: Sequence[NewTimesheetEntry]) -> None:
        raise NotImplementedError


class TimesheetRepository(Protocol):
    def get_week(self, *, user_id: int, week_start: date) -> Optional[Timesheet]:
        raise NotImplementedError

    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        raise NotImplementedError

    def lock_week(self, *, user_id: int, week_start: date) -> ContextManager[TimesheetWeekLock]:
        """Locate-or-create the (user, week) row and lock it FOR UPDATE."""
        raise NotImplementedError

    def submit(self, *, user_id: int, week_start: date, from_statuses: AbstractSet[TimesheetStatus]) -> bool:
        raise NotImplementedError

    def review(
        self,
        *,
        timesheet_id: int,
        outcome: TimesheetStatus,
        reviewer_id: int,
        reason: Optional[str] = None,
    ) -> bool:
        """Conditional update from submitted to approved/rejected."""
        raise NotImplementedError

    def get_entry_ownership(self, entry_id: int) -> Optional[EntryOwnership]:
        raise NotImplementedError

    def delete_entry(self, *, entry_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def list_by_status(self, status: TimesheetStatus) -> Sequence[Timesheet]:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[Timesheet]:
        raise NotImplementedError

    def entries_for_task(self, task_id: int) -> Sequence[TimesheetEntry]:
        raise NotImplementedError

    def entries_for_date(self, *, user_id: int, work_date: date) -> Sequence[TimesheetEntry]:
        raise NotImplementedError
