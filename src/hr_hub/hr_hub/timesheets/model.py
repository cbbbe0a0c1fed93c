from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import TimesheetStatus


@dataclass(frozen=True)
class TimesheetEntry:
    entry_id: int
    timesheet_id: int
    project_id: int
    task_id: Optional[int]
    work_date: date
    hours: float
    note: Optional[str] = None
    project_name: Optional[str] = None
    task_title: Optional[str] = None
    user_id: Optional[int] = None
    user_name: Optional[str] = None


@dataclass(frozen=True)
class NewTimesheetEntry:
    """Entry as submitted by the owner on save (not persisted yet)."""

    project_id: int
    work_date: date
    hours: float
    task_id: Optional[int] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class Timesheet:
    """Aggregate root: one week of one user, owning its entries.

    timesheet_id is None for the unsaved draft shell returned by get_week.
    """

    timesheet_id: Optional[int]
    user_id: int
    week_start_date: date
    status: TimesheetStatus
    entries: Tuple[TimesheetEntry, ...] = ()
    total_hours: float = 0.0
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejection_reason: Optional[str] = None
    user_name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class EntryOwnership:
    entry_id: int
    timesheet_id: int
    user_id: int
    status: TimesheetStatus
