from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import OnboardingStatus, OnboardingStepStatus, OnboardingStepType


@dataclass(frozen=True)
class OnboardingStep:
    step_id: int
    submission_id: int
    step_type: OnboardingStepType
    status: OnboardingStepStatus
    version: int = 1
    step_data: Optional[dict[str, Any]] = None
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None
    review_comments: Optional[str] = None
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class OnboardingSubmission:
    """One onboarding run for an employee; owns a fixed set of steps."""

    submission_id: int
    employee_id: int
    status: OnboardingStatus
    created_by: int
    created_at: datetime
    version: int = 1
    completed_at: Optional[datetime] = None
    employee_name: Optional[str] = None
    department_name: Optional[str] = None
    total_steps: int = 0
    approved_steps: int = 0
    steps: tuple[OnboardingStep, ...] = field(default_factory=tuple)

    @property
    def progress_percent(self) -> int:
        if not self.total_steps:
            return 0
        return int(self.approved_steps * 100 / self.total_steps)
