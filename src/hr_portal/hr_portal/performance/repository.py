from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import CycleStatus, GoalCategory, GoalStatus, ReviewStatus
from .model import GoalUpdate, PerformanceGoal, PerformanceReview, ReviewCycle


class ReviewCycleRepository(Protocol):
    def create(self, *, values: dict[str, Any]) -> int:
        raise NotImplementedError

    def get(self, *, cycle_id: int) -> Optional[ReviewCycle]:
        raise NotImplementedError

    def list_cycles(self, *, status: Optional[CycleStatus] = None, limit: int = 200) -> Sequence[ReviewCycle]:
        raise NotImplementedError

    def update(self, *, cycle_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, *, cycle_id: int, expected_version: int) -> bool:
        """Delete only an unchanged cycle that no review points at."""

        raise NotImplementedError


class GoalRepository(Protocol):
    def create(self, *, employee_id: int, values: dict[str, Any]) -> int:
        raise NotImplementedError

    def get(self, *, goal_id: int) -> Optional[PerformanceGoal]:
        raise NotImplementedError

    def list_goals(
        self,
        *,
        employee_id: int,
        status: Optional[GoalStatus] = None,
        category: Optional[GoalCategory] = None,
        limit: int = 200,
    ) -> Sequence[PerformanceGoal]:
        raise NotImplementedError

    def update(self, *, goal_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, *, goal_id: int, expected_version: int) -> bool:
        raise NotImplementedError

    def add_update(
        self,
        *,
        goal_id: int,
        expected_version: int,
        update_text: str,
        progress: int,
        created_by: int,
    ) -> Optional[int]:
        """Record a progress note and move the goal's progress in one transaction.

        Returns the new update id, or None with nothing written when the goal moved on.
        """
        raise NotImplementedError

    def list_updates(self, *, goal_id: int) -> Sequence[GoalUpdate]:
        raise NotImplementedError


class ReviewRepository(Protocol):
    def create(self, *, values: dict[str, Any]) -> int:
        raise NotImplementedError

    def get(self, *, review_id: int) -> Optional[PerformanceReview]:
        raise NotImplementedError

    def list_reviews(
        self,
        *,
        employee_id: Optional[int] = None,
        cycle_id: Optional[int] = None,
        status: Optional[ReviewStatus] = None,
        limit: int = 200,
    ) -> Sequence[PerformanceReview]:
        raise NotImplementedError

    def update(self, *, review_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, *, review_id: int, expected_version: int) -> bool:
        raise NotImplementedError
