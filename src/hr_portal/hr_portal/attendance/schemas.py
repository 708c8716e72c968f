from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.enums import AttendanceAction, AttendanceStatus, RegularizationStatus


class MarkAttendanceBody(BaseModel):
    action: AttendanceAction
    location: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None


class UpdateAttendanceBody(BaseModel):
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    version: Optional[int] = None


class RegularizationBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    work_date: date = Field(alias="date")
    reason: str = Field(min_length=1)


class ReviewRegularizationBody(BaseModel):
    status: RegularizationStatus
    review_comments: Optional[str] = None
    version: Optional[int] = None
