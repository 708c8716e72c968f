from __future__ import annotations

import dataclasses
import logging
from typing import Any, Optional, Sequence

from ..common.aggregation import count_by_status
from ..common.datetime_utils import now_local
from ..common.validators import clean_optional
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import MANAGEMENT_ROLES, OnboardingStatus, OnboardingStepStatus, OnboardingStepType, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..users.repository import EmployeeRepository
from ..workflow.definitions import ONBOARDING_STEP_WORKFLOW, ONBOARDING_SUBMISSION_WORKFLOW
from ..workflow.gate import require_roles
from .model import OnboardingStep, OnboardingSubmission
from .repository import OnboardingRepository

logger = logging.getLogger(__name__)

REVIEW_OUTCOMES = frozenset(
    {OnboardingStepStatus.APPROVED, OnboardingStepStatus.REJECTED, OnboardingStepStatus.CHANGES_REQUESTED}
)

_STALE = "Onboarding record was modified by someone else, reload and retry"


class OnboardingService:
    """Onboarding submissions and the per-step submit/review cycle.

    Every write is a compare-and-set on the row's ``version``. The submission
    follows its steps: the first submitted step moves it to IN_PROGRESS, and
    it becomes COMPLETED once every step is APPROVED. That check runs after the
    review write, against freshly read steps. A completed submission stays
    completed.
    """

    def __init__(self, onboarding: OnboardingRepository, employees: EmployeeRepository):
        self._onboarding = onboarding
        self._employees = employees

    def _load_submission(self, submission_id: int) -> OnboardingSubmission:
        sub = self._onboarding.get_submission(submission_id=int(submission_id))
        if not sub:
            raise NotFoundError("Onboarding submission not found")
        return sub

    def _load_step(self, step_id: int) -> tuple[OnboardingStep, OnboardingSubmission]:
        step = self._onboarding.get_step(step_id=int(step_id))
        if not step:
            raise NotFoundError("Onboarding step not found")
        return step, self._load_submission(step.submission_id)

    def _with_steps(self, sub: OnboardingSubmission) -> OnboardingSubmission:
        return dataclasses.replace(sub, steps=tuple(self._onboarding.list_steps(submission_id=sub.submission_id)))

    def create_submission(self, principal: Principal, *, employee_id: int) -> OnboardingSubmission:
        require_roles(principal, {Role.ADMIN}, "Admin access required")

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")

        existing = self._onboarding.latest_for_employee(employee_id=employee.employee_id)
        if existing and not ONBOARDING_SUBMISSION_WORKFLOW.is_terminal(existing.status):
            raise ValidationError("Employee already has an onboarding in progress")

        submission_id = self._onboarding.create_submission(
            employee_id=employee.employee_id,
            created_by=principal.user_id,
            step_types=list(OnboardingStepType),
        )
        logger.info("Onboarding %s created for employee %s", submission_id, employee.employee_id)
        return self._with_steps(self._load_submission(submission_id))

    def list_submissions(
        self, principal: Principal, *, status: Optional[OnboardingStatus] = None
    ) -> Sequence[OnboardingSubmission]:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        return [
            self._with_steps(sub)
            for sub in self._onboarding.list_submissions(status=status, limit=DEFAULT_LIST_LIMIT)
        ]

    def get_submission(self, principal: Principal, submission_id: int) -> OnboardingSubmission:
        sub = self._load_submission(submission_id)
        if not (principal.is_management or principal.owns(sub.employee_id)):
            raise AuthorizationError("You can only view your own onboarding")
        return self._with_steps(sub)

    def my_status(self, principal: Principal) -> Optional[OnboardingSubmission]:
        if principal.employee_id is None:
            return None
        sub = self._onboarding.latest_for_employee(employee_id=principal.employee_id)
        return self._with_steps(sub) if sub else None

    def cancel_submission(self, principal: Principal, submission_id: int) -> OnboardingSubmission:
        sub = self._load_submission(submission_id)
        ONBOARDING_SUBMISSION_WORKFLOW.require_transition(sub.status, OnboardingStatus.CANCELLED, principal.role)
        if not self._onboarding.update_submission(
            submission_id=sub.submission_id,
            expected_version=sub.version,
            values={"status": OnboardingStatus.CANCELLED},
        ):
            raise ConflictError(_STALE)
        logger.info("Onboarding %s cancelled by user %s", sub.submission_id, principal.user_id)
        return self._with_steps(self._load_submission(sub.submission_id))

    def submit_step(
        self,
        principal: Principal,
        step_id: int,
        *,
        step_data: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> OnboardingStep:
        """Store the employee's data for a step and (re)submit it for review.

        A step already SUBMITTED only gets its data replaced.
        """
        step, sub = self._load_step(step_id)
        if not principal.owns(sub.employee_id):
            raise NotFoundError("Onboarding step not found")
        if ONBOARDING_SUBMISSION_WORKFLOW.is_terminal(sub.status):
            raise ValidationError(f"Onboarding is {sub.status.value.lower()} and cannot be modified")
        if ONBOARDING_STEP_WORKFLOW.is_terminal(step.status):
            raise ValidationError("This step has already been approved and cannot be modified")
        if expected_version is not None and int(expected_version) != step.version:
            raise ConflictError(_STALE)
        if not step_data:
            raise ValidationError("Step data is required")

        values: dict[str, Any] = {"step_data": dict(step_data)}
        if step.status != OnboardingStepStatus.SUBMITTED:
            ONBOARDING_STEP_WORKFLOW.require_transition(step.status, OnboardingStepStatus.SUBMITTED, principal.role)
            values["status"] = OnboardingStepStatus.SUBMITTED
            values["submitted_at"] = now_local()

        if not self._onboarding.update_step(step_id=step.step_id, expected_version=step.version, values=values):
            raise ConflictError(_STALE)

        if sub.status == OnboardingStatus.CREATED:
            self._start_submission(sub)

        logger.info("Onboarding step %s (%s) submitted by employee %s", step.step_id, step.step_type.value, sub.employee_id)
        return self._onboarding.get_step(step_id=step.step_id)

    def _start_submission(self, sub: OnboardingSubmission) -> None:
        if self._onboarding.update_submission(
            submission_id=sub.submission_id,
            expected_version=sub.version,
            values={"status": OnboardingStatus.IN_PROGRESS},
        ):
            return
        # another step submission may already have started it
        current = self._load_submission(sub.submission_id)
        if current.status == OnboardingStatus.CREATED:
            raise ConflictError(_STALE)

    def review_step(
        self,
        principal: Principal,
        step_id: int,
        *,
        status: OnboardingStepStatus,
        comments: Optional[str] = None,
        rejection_reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> OnboardingStep:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        target = OnboardingStepStatus(status)
        if target not in REVIEW_OUTCOMES:
            raise ValidationError("Review must approve, reject or request changes")

        step, sub = self._load_step(step_id)
        if sub.status == OnboardingStatus.CANCELLED:
            raise ValidationError("Onboarding is cancelled")
        if expected_version is not None and int(expected_version) != step.version:
            raise ConflictError(_STALE)
        ONBOARDING_STEP_WORKFLOW.require_transition(step.status, target, principal.role)

        values: dict[str, Any] = {
            "status": target,
            "reviewed_at": now_local(),
            "reviewed_by": principal.user_id,
            "review_comments": clean_optional(comments),
            "rejection_reason": clean_optional(rejection_reason) if target != OnboardingStepStatus.APPROVED else None,
        }
        if not self._onboarding.update_step(step_id=step.step_id, expected_version=step.version, values=values):
            raise ConflictError(_STALE)

        logger.info(
            "Onboarding step %s: %s -> %s by user %s",
            step.step_id,
            step.status.value,
            target.value,
            principal.user_id,
        )
        if target == OnboardingStepStatus.APPROVED:
            self._complete_if_all_approved(sub.submission_id)
        return self._onboarding.get_step(step_id=step.step_id)

    def _complete_if_all_approved(self, submission_id: int) -> bool:
        sub = self._load_submission(submission_id)
        if ONBOARDING_SUBMISSION_WORKFLOW.is_terminal(sub.status):
            return sub.status == OnboardingStatus.COMPLETED

        steps = self._onboarding.list_steps(submission_id=sub.submission_id)
        if not steps or any(s.status != OnboardingStepStatus.APPROVED for s in steps):
            return False

        if not self._onboarding.update_submission(
            submission_id=sub.submission_id,
            expected_version=sub.version,
            values={"status": OnboardingStatus.COMPLETED, "completed_at": now_local()},
        ):
            current = self._load_submission(sub.submission_id)
            if current.status != OnboardingStatus.COMPLETED:
                raise ConflictError(_STALE)
            return True

        logger.info("Onboarding %s completed for employee %s", sub.submission_id, sub.employee_id)
        return True

    def stats(self) -> dict[str, int]:
        return count_by_status(self._onboarding.count_by_status(), OnboardingStatus)
