from __future__ import annotations

from ..model import AttendanceReportRow
from .base import WorkedTimeCalculator


class StandardWorkedTimeCalculator(WorkedTimeCalculator):
    """Standard rule: out - in for complete rows, 0 otherwise, never negative."""

    def worked_minutes(self, row: AttendanceReportRow) -> int:
        if not row.check_in_at or not row.check_out_at:
            return 0
        minutes = int((row.check_out_at - row.check_in_at).total_seconds() // 60)
        return max(minutes, 0)
