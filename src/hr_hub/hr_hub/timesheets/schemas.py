from __future__ import annotations

import datetime
from typing import List, Optional

from pydantic import Field

from ..common.request_parsing import CamelModel
from ..core.constants import MAX_ENTRY_HOURS, NOTE_MAX_LENGTH
from ..core.enums import ReviewAction
from .model import NewTimesheetEntry


class WeekQuery(CamelModel):
    week_start_date: datetime.date


class EntryIn(CamelModel):
    project_id: int = Field(..., gt=0)
    task_id: Optional[int] = Field(None, gt=0)
    work_date: datetime.date
    hours: float = Field(..., gt=0, le=MAX_ENTRY_HOURS)
    note: Optional[str] = Field(None, max_length=NOTE_MAX_LENGTH)

    def to_entry(self) -> NewTimesheetEntry:
        return NewTimesheetEntry(
            project_id=self.project_id,
            task_id=self.task_id,
            work_date=self.work_date,
            hours=self.hours,
            note=self.note,
        )


class SaveWeek(CamelModel):
    week_start_date: datetime.date
    entries: List[EntryIn] = Field(default_factory=list)


class SubmitWeek(CamelModel):
    week_start_date: datetime.date


class TimesheetDecision(CamelModel):
    action: ReviewAction
    reason: Optional[str] = Field(None, max_length=NOTE_MAX_LENGTH)


class EntriesQuery(CamelModel):
    date: datetime.date
