from __future__ import annotations

import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..common.request_parsing import CamelModel, hhmm
from ..core.constants import DEFAULT_RECENT_DAYS
from ..core.enums import AttendanceStatus


class TeamAttendanceUpdate(CamelModel):
    user_id: int = Field(..., gt=0)
    work_date: datetime.date
    status: AttendanceStatus
    check_in_time: Optional[datetime.time] = None
    check_out_time: Optional[datetime.time] = None

    @field_validator("check_in_time", "check_out_time", mode="before")
    @classmethod
    def parse_times(cls, v):
        return hhmm(v)


class TeamDateQuery(CamelModel):
    date: Optional[datetime.date] = None


class CalendarQuery(CamelModel):
    year: Optional[int] = Field(None, ge=2000, le=2100)
    month: Optional[int] = Field(None, ge=1, le=12)


class RecentQuery(CamelModel):
    days: int = Field(DEFAULT_RECENT_DAYS, ge=1, le=366)


class DateRangeQuery(CamelModel):
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
