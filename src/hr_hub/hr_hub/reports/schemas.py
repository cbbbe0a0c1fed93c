from __future__ import annotations

import datetime
from typing import Optional

from pydantic import Field

from ..common.request_parsing import CamelModel
from ..core.enums import Role
from .query import ReportFilter


class ReportQuery(CamelModel):
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    user_id: Optional[int] = Field(None, gt=0)
    role: Optional[Role] = None
    department: Optional[str] = None

    def to_filter(self) -> ReportFilter:
        return ReportFilter(
            start=self.start_date,
            end=self.end_date,
            user_id=self.user_id,
            role=self.role,
            department=self.department or None,
        )
