from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import AttendanceReportRow


class WorkedTimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def worked_minutes(self, row: AttendanceReportRow) -> int:
        raise NotImplementedError
