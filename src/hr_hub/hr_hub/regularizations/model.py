from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import RegularizationType, RequestStatus


@dataclass(frozen=True)
class RegularizationRequest:
    """Employee-proposed correction of a check-in or check-out time."""

    request_id: int
    user_id: int
    work_date: date
    type: RegularizationType
    proposed_time: time
    reason: str
    status: RequestStatus
    created_at: datetime
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_comment: Optional[str] = None
    user_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def proposed_at(self) -> datetime:
        return datetime.combine(self.work_date, self.proposed_time)
