from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import hours_between
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row per (user, work_date).

    attendance_id is None for the synthetic "not checked in yet" record.
    """

    attendance_id: Optional[int]
    user_id: int
    work_date: date
    status: AttendanceStatus
    check_in_at: Optional[datetime] = None
    check_out_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def worked_hours(self) -> float:
        return hours_between(self.check_in_at, self.check_out_at)


@dataclass(frozen=True)
class TeamAttendanceRow:
    """Read model: an active user joined with (possibly missing) attendance of one day."""

    user_id: int
    employee_code: str
    user_name: str
    email: str
    department: Optional[str]
    work_date: date
    status: AttendanceStatus
    check_in_at: Optional[datetime]
    check_out_at: Optional[datetime]
    attendance_id: Optional[int]


@dataclass(frozen=True)
class WeeklySummary:
    week_start: date
    week_end: date
    days_present: int
    late_arrivals: int
    total_hours: float
    average_hours: float
