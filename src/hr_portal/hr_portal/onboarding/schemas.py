from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from ..core.enums import OnboardingStepStatus


class CreateSubmissionBody(BaseModel):
    employee_id: int = Field(gt=0)


class SubmitStepBody(BaseModel):
    step_data: dict[str, Any] = Field(min_length=1)
    version: Optional[int] = None


class ReviewStepBody(BaseModel):
    status: OnboardingStepStatus
    comments: Optional[str] = None
    rejection_reason: Optional[str] = None
    version: Optional[int] = None
