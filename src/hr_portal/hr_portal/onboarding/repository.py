from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import OnboardingStatus, OnboardingStepType
from .model import OnboardingStep, OnboardingSubmission


class OnboardingRepository(Protocol):
    def create_submission(
        self, *, employee_id: int, created_by: int, step_types: Sequence[OnboardingStepType]
    ) -> int:
        """Insert the submission and one PENDING step per type in a single transaction."""

        raise NotImplementedError

    def get_submission(self, *, submission_id: int) -> Optional[OnboardingSubmission]:
        raise NotImplementedError

    def latest_for_employee(self, *, employee_id: int) -> Optional[OnboardingSubmission]:
        raise NotImplementedError

    def list_submissions(
        self, *, status: Optional[OnboardingStatus] = None, limit: int = 200
    ) -> Sequence[OnboardingSubmission]:
        raise NotImplementedError

    def update_submission(self, *, submission_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def get_step(self, *, step_id: int) -> Optional[OnboardingStep]:
        raise NotImplementedError

    def list_steps(self, *, submission_id: int) -> Sequence[OnboardingStep]:
        raise NotImplementedError

    def update_step(self, *, step_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def count_by_status(self) -> Sequence[dict]:
        raise NotImplementedError
