from __future__ import annotations

import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..common.request_parsing import CamelModel, hhmm
from ..core.constants import NOTE_MAX_LENGTH
from ..core.enums import RegularizationType, ReviewAction
from .service import REASON_MAX_LENGTH, REASON_MIN_LENGTH


class RegularizationCreate(CamelModel):
    work_date: datetime.date
    type: RegularizationType
    proposed_time: datetime.time
    reason: str = Field(..., min_length=REASON_MIN_LENGTH, max_length=REASON_MAX_LENGTH)

    @field_validator("proposed_time", mode="before")
    @classmethod
    def parse_proposed_time(cls, v):
        return hhmm(v)

    @field_validator("reason", mode="before")
    @classmethod
    def strip_reason(cls, v):
        return v.strip() if isinstance(v, str) else v


class Decision(CamelModel):
    action: ReviewAction
    comment: Optional[str] = Field(None, max_length=NOTE_MAX_LENGTH)
