from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.enums import (
    CycleStatus,
    CycleType,
    GoalCategory,
    GoalPriority,
    GoalStatus,
    ReviewRating,
    ReviewStatus,
)


class CreateCycleBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=150)
    cycle_type: CycleType = Field(alias="type")
    start_date: date
    end_date: date
    status: CycleStatus = CycleStatus.ACTIVE

    @model_validator(mode="after")
    def _check_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class UpdateCycleBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    cycle_type: Optional[CycleType] = Field(default=None, alias="type")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[CycleStatus] = None
    version: Optional[int] = None


class CreateGoalBody(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    target: str = Field(min_length=1)
    category: GoalCategory
    priority: GoalPriority = GoalPriority.MEDIUM
    start_date: date
    end_date: date


class UpdateGoalBody(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    target: Optional[str] = None
    category: Optional[GoalCategory] = None
    priority: Optional[GoalPriority] = None
    status: Optional[GoalStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    version: Optional[int] = None


class GoalProgressBody(BaseModel):
    update_text: str = Field(min_length=1)
    progress: int = Field(ge=0, le=100)


class CreateReviewBody(BaseModel):
    employee_id: int
    cycle_id: int
    goal_id: Optional[int] = None
    review_type: CycleType
    rating: ReviewRating
    comments: Optional[str] = None
    strengths: Optional[str] = None
    improvements: Optional[str] = None


class UpdateReviewBody(BaseModel):
    rating: Optional[ReviewRating] = None
    comments: Optional[str] = None
    strengths: Optional[str] = None
    improvements: Optional[str] = None
    status: Optional[ReviewStatus] = None
    version: Optional[int] = None
