from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from ..common.datetime_utils import month_bounds, now_local, sunday_week_bounds
from ..core.constants import DEFAULT_RECENT_DAYS, LATE_ARRIVAL_CUTOFF
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import AttendanceRecord, WeeklySummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def is_late_arrival(record: AttendanceRecord) -> bool:
    return bool(record.check_in_at) and record.check_in_at.time() >= LATE_ARRIVAL_CUTOFF


class AttendanceService:
    def __init__(self, attendance: AttendanceRepository, users: UserRepository):
        self._attendance = attendance
        self._users = users

    def get_today(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        today = (now or now_local()).date()
        record = self._attendance.get_for_user_and_date(user_id, today)
        if record:
            return record
        return AttendanceRecord(
            attendance_id=None,
            user_id=int(user_id),
            work_date=today,
            status=AttendanceStatus.NOT_CHECKED_IN,
        )

    def clock_in(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or now_local()
        self._attendance.upsert_check_in(user_id=int(user_id), work_date=now.date(), check_in_at=now)
        logger.info("User %s clocked in at %s", user_id, now.isoformat())
        return self.get_today(user_id, now=now)

    def clock_out(self, user_id: int, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        if not self._attendance.mark_check_out(user_id=int(user_id), work_date=today, check_out_at=now):
            record = self._attendance.get_for_user_and_date(user_id, today)
            current = record.status.value if record else AttendanceStatus.NOT_CHECKED_IN.value
            if not record or not record.check_in_at:
                raise InvalidTransitionError(current, "checked_out", "Cannot check out without checking in")
            if record.check_out_at:
                raise InvalidTransitionError(current, "checked_out", "Already checked out today")
            raise InvalidTransitionError(current, "checked_out", "Check-out time cannot be earlier than check-in time")

        logger.info("User %s clocked out at %s", user_id, now.isoformat())
        return self.get_today(user_id, now=now)

    def manager_upsert(
        self,
        *,
        user_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in: Optional[time] = None,
        check_out: Optional[time] = None,
    ) -> AttendanceRecord:
        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("Employee not found")

        check_in_at: Optional[datetime] = None
        check_out_at: Optional[datetime] = None
        # Only a present day carries timestamps; absent/not_checked_in always clears them.
        if status == AttendanceStatus.PRESENT:
            check_in_at = datetime.combine(work_date, check_in) if check_in else None
            check_out_at = datetime.combine(work_date, check_out) if check_out else None
            if check_out_at and not check_in_at:
                raise ValidationError("Check-out requires a check-in time")
            if check_in_at and check_out_at and check_out_at < check_in_at:
                raise ValidationError("Check-out time cannot be earlier than check-in time")

        self._attendance.manager_upsert(
            user_id=int(user_id),
            work_date=work_date,
            status=status,
            check_in_at=check_in_at,
            check_out_at=check_out_at,
        )
        record = self._attendance.get_for_user_and_date(int(user_id), work_date)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def calendar(self, user_id: int, *, year: Optional[int] = None, month: Optional[int] = None):
        if (year is None) != (month is None):
            raise ValidationError("Year and month must be provided together")
        if year is not None:
            start, next_month = month_bounds(year, month)
            return self._attendance.list_for_user(
                user_id=int(user_id), start_date=start, end_date=next_month - timedelta(days=1)
            )
        return self._attendance.list_for_user(user_id=int(user_id))

    def team_for_date(self, work_date: date):
        return self._attendance.team_for_date(work_date)

    def weekly_summary(self, user_id: int, *, today: Optional[date] = None) -> WeeklySummary:
        start, end = sunday_week_bounds(today or now_local().date())
        rows = self._attendance.list_for_user(user_id=int(user_id), start_date=start, end_date=end)

        present = [r for r in rows if r.status == AttendanceStatus.PRESENT]
        total_hours = sum(r.worked_hours for r in rows)
        return WeeklySummary(
            week_start=start,
            week_end=end,
            days_present=len(present),
            late_arrivals=sum(1 for r in present if is_late_arrival(r)),
            total_hours=round(total_hours, 1),
            average_hours=round(total_hours / len(present), 1) if present else 0.0,
        )

    def recent(self, user_id: int, *, days: int = DEFAULT_RECENT_DAYS, today: Optional[date] = None) -> list[dict]:
        today = today or now_local().date()
        rows = self._attendance.list_for_user(
            user_id=int(user_id),
            start_date=today - timedelta(days=max(int(days), 1)),
            newest_first=True,
        )
        return [
            {
                "date": r.work_date,
                "day": r.work_date.strftime("%A"),
                "check_in": r.check_in_at,
                "check_out": r.check_out_at,
                "hours": round(r.worked_hours, 2),
                "status": r.status,
            }
            for r in rows
        ]

    def employee_attendance(self, employee_id: int, *, start: Optional[date] = None, end: Optional[date] = None):
        if start and end and end < start:
            raise ValidationError("endDate must be on or after startDate")
        return self._attendance.list_for_user(
            user_id=int(employee_id), start_date=start, end_date=end, newest_first=True
        )
