from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from ..core.enums import LeaveStatus, LeaveType


class ApplyLeaveBody(BaseModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(min_length=1)

    @model_validator(mode="after")
    def _check_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class LeaveStatusBody(BaseModel):
    status: LeaveStatus
    comments: Optional[str] = None
    version: Optional[int] = None
