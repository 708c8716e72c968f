from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import clean_optional, require_choice
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import MANAGEMENT_ROLES, CycleStatus, CycleType, ReviewRating, ReviewStatus, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..users.repository import EmployeeRepository
from ..workflow.definitions import PERFORMANCE_REVIEW_WORKFLOW
from ..workflow.gate import require_roles
from .model import PerformanceReview
from .repository import GoalRepository, ReviewCycleRepository, ReviewRepository

logger = logging.getLogger(__name__)

_STALE = "Review was modified by someone else, reload and retry"
_NOTE_FIELDS = ("comments", "strengths", "improvements")
# the reviewed employee may answer in the comments, nothing else
_SUBJECT_EDITABLE = frozenset({"comments"})


class ReviewService:
    def __init__(
        self,
        reviews: ReviewRepository,
        cycles: ReviewCycleRepository,
        goals: GoalRepository,
        employees: EmployeeRepository,
    ):
        self._reviews = reviews
        self._cycles = cycles
        self._goals = goals
        self._employees = employees

    def _load(self, review_id: int) -> PerformanceReview:
        review = self._reviews.get(review_id=int(review_id))
        if not review:
            raise NotFoundError("Review not found")
        return review

    def list_reviews(
        self,
        principal: Principal,
        *,
        employee_id: Optional[int] = None,
        cycle_id: Optional[int] = None,
        status: Optional[ReviewStatus] = None,
    ) -> Sequence[PerformanceReview]:
        """Employees only ever get their own reviews, whatever filter they send."""
        if not principal.is_management:
            if principal.employee_id is None:
                return []
            employee_id = principal.employee_id
        return self._reviews.list_reviews(
            employee_id=employee_id, cycle_id=cycle_id, status=status, limit=DEFAULT_LIST_LIMIT
        )

    def get_review(self, principal: Principal, review_id: int) -> PerformanceReview:
        review = self._load(review_id)
        if principal.role == Role.EMPLOYEE and not principal.owns(review.employee_id):
            raise AuthorizationError("Forbidden")
        return review

    def create_review(
        self,
        principal: Principal,
        *,
        employee_id: int,
        cycle_id: int,
        review_type: CycleType,
        rating: ReviewRating,
        goal_id: Optional[int] = None,
        comments: Optional[str] = None,
        strengths: Optional[str] = None,
        improvements: Optional[str] = None,
    ) -> PerformanceReview:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        if not self._employees.get_by_id(int(employee_id)):
            raise ValidationError("Employee does not exist")
        cycle = self._cycles.get(cycle_id=int(cycle_id))
        if not cycle:
            raise ValidationError("Cycle does not exist")
        if cycle.status != CycleStatus.ACTIVE:
            raise ValidationError("Reviews can only be added to an active cycle")
        if goal_id is not None:
            goal = self._goals.get(goal_id=int(goal_id))
            if not goal or goal.employee_id != int(employee_id):
                raise ValidationError("Goal does not belong to this employee")

        review_id = self._reviews.create(
            values={
                "employee_id": int(employee_id),
                "cycle_id": cycle.cycle_id,
                "goal_id": goal_id,
                "review_type": CycleType(review_type),
                "rating": ReviewRating(rating),
                "status": ReviewStatus.PENDING,
                "comments": clean_optional(comments),
                "strengths": clean_optional(strengths),
                "improvements": clean_optional(improvements),
                "reviewed_by": principal.user_id,
            }
        )
        logger.info("Review %s of employee %s created by user %s", review_id, employee_id, principal.user_id)
        return self._load(review_id)

    def update_review(
        self,
        principal: Principal,
        review_id: int,
        *,
        expected_version: Optional[int] = None,
        **changes: Any,
    ) -> PerformanceReview:
        """Admins and the reviewer edit the whole review; the subject may only comment."""
        review = self._load(review_id)
        is_subject = principal.role == Role.EMPLOYEE and principal.owns(review.employee_id)
        if not (principal.is_admin or review.reviewed_by == principal.user_id or is_subject):
            raise AuthorizationError("Forbidden")
        if is_subject:
            denied = sorted(set(changes) - _SUBJECT_EDITABLE)
            if denied:
                raise AuthorizationError(f"Not allowed to change: {', '.join(denied)}")
        if PERFORMANCE_REVIEW_WORKFLOW.is_terminal(review.status):
            raise ValidationError(f"Review is {review.status.value.lower()} and can no longer change")
        if expected_version is not None and int(expected_version) != review.version:
            raise ConflictError(_STALE)

        values: dict[str, Any] = {}
        if "rating" in changes:
            values["rating"] = require_choice(changes["rating"], ReviewRating, "Rating")
        for name in _NOTE_FIELDS:
            if name in changes:
                values[name] = clean_optional(changes[name])
        if "status" in changes:
            target = require_choice(changes["status"], ReviewStatus, "Status")
            if target != review.status:
                PERFORMANCE_REVIEW_WORKFLOW.require_transition(review.status, target, principal.role)
                values["status"] = target
                if target == ReviewStatus.COMPLETED:
                    values["reviewed_at"] = now_local()

        if not values:
            return review
        if not self._reviews.update(review_id=review.review_id, expected_version=review.version, values=values):
            raise ConflictError(_STALE)
        logger.info("Review %s updated by user %s (%s)", review.review_id, principal.user_id, ", ".join(sorted(values)))
        return self._load(review.review_id)

    def delete_review(self, principal: Principal, review_id: int) -> None:
        if principal.role != Role.ADMIN:
            raise AuthorizationError("Admin access required")
        review = self._load(review_id)
        if not self._reviews.delete(review_id=review.review_id, expected_version=review.version):
            raise ConflictError(_STALE)
        logger.info("Review %s deleted by user %s", review.review_id, principal.user_id)
