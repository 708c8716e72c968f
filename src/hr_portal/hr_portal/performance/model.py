from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import (
    CycleStatus,
    CycleType,
    GoalCategory,
    GoalPriority,
    GoalStatus,
    ReviewRating,
    ReviewStatus,
)


@dataclass(frozen=True)
class ReviewCycle:
    cycle_id: int
    name: str
    cycle_type: CycleType
    start_date: date
    end_date: date
    status: CycleStatus
    version: int = 1
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    review_count: int = 0


@dataclass(frozen=True)
class PerformanceGoal:
    """A goal an employee sets for themselves; progress is a 0-100 percentage."""

    goal_id: int
    employee_id: int
    title: str
    description: str
    target: str
    category: GoalCategory
    priority: GoalPriority
    status: GoalStatus
    start_date: date
    end_date: date
    progress: int = 0
    version: int = 1
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class GoalUpdate:
    update_id: int
    goal_id: int
    update_text: str
    progress: int
    created_by: int
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PerformanceReview:
    review_id: int
    employee_id: int
    cycle_id: int
    review_type: CycleType
    rating: ReviewRating
    status: ReviewStatus
    reviewed_by: int
    goal_id: Optional[int] = None
    comments: Optional[str] = None
    strengths: Optional[str] = None
    improvements: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    version: int = 1
    employee_name: Optional[str] = None
    cycle_name: Optional[str] = None
