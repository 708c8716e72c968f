from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from ..common.validators import require_choice, require_max_length, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_TITLE_LENGTH
from ..core.enums import GoalCategory, GoalPriority, GoalStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..workflow.definitions import GOAL_WORKFLOW
from .model import GoalUpdate, PerformanceGoal
from .repository import GoalRepository

logger = logging.getLogger(__name__)

_STALE = "Goal was modified by someone else, reload and retry"
_TEXT_FIELDS = (("title", "Title"), ("description", "Description"), ("target", "Target"))


def _require_progress(value) -> int:
    try:
        progress = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Progress must be a whole number")
    if not 0 <= progress <= 100:
        raise ValidationError("Progress must be between 0 and 100")
    return progress


class GoalService:
    """Personal goals. Only the owning employee sees or touches a goal."""

    def __init__(self, goals: GoalRepository):
        self._goals = goals

    def _own(self, principal: Principal, goal_id: int) -> PerformanceGoal:
        goal = self._goals.get(goal_id=int(goal_id))
        # someone else's goal looks exactly like a missing one
        if not goal or not principal.owns(goal.employee_id):
            raise NotFoundError("Goal not found")
        return goal

    def list_goals(
        self,
        principal: Principal,
        *,
        status: Optional[GoalStatus] = None,
        category: Optional[GoalCategory] = None,
    ) -> Sequence[PerformanceGoal]:
        if principal.employee_id is None:
            return []
        return self._goals.list_goals(
            employee_id=principal.employee_id, status=status, category=category, limit=DEFAULT_LIST_LIMIT
        )

    def get_goal(self, principal: Principal, goal_id: int) -> PerformanceGoal:
        return self._own(principal, goal_id)

    def create_goal(
        self,
        principal: Principal,
        *,
        title: str,
        description: str,
        target: str,
        category: GoalCategory,
        start_date: date,
        end_date: date,
        priority: GoalPriority = GoalPriority.MEDIUM,
    ) -> PerformanceGoal:
        if principal.employee_id is None:
            raise NotFoundError("Employee not found")
        if start_date > end_date:
            raise ValidationError("Start date must be on or before end date")
        goal_id = self._goals.create(
            employee_id=principal.employee_id,
            values={
                "title": require_max_length(require_non_empty(title, "Title"), "Title", MAX_TITLE_LENGTH),
                "description": require_non_empty(description, "Description"),
                "target": require_non_empty(target, "Target"),
                "category": GoalCategory(category),
                "priority": GoalPriority(priority),
                "status": GoalStatus.ACTIVE,
                "start_date": start_date,
                "end_date": end_date,
                "progress": 0,
            },
        )
        logger.info("Goal %s created by employee %s", goal_id, principal.employee_id)
        return self._own(principal, goal_id)

    def update_goal(
        self,
        principal: Principal,
        goal_id: int,
        *,
        expected_version: Optional[int] = None,
        **changes: Any,
    ) -> PerformanceGoal:
        goal = self._own(principal, goal_id)
        if GOAL_WORKFLOW.is_terminal(goal.status):
            raise ValidationError(f"Goal is {goal.status.value.lower()} and can no longer change")
        if expected_version is not None and int(expected_version) != goal.version:
            raise ConflictError(_STALE)

        values: dict[str, Any] = {}
        for name, label in _TEXT_FIELDS:
            if name in changes:
                values[name] = require_non_empty(changes[name], label)
        if "title" in values:
            require_max_length(values["title"], "Title", MAX_TITLE_LENGTH)
        if "category" in changes:
            values["category"] = require_choice(changes["category"], GoalCategory, "Category")
        if "priority" in changes:
            values["priority"] = require_choice(changes["priority"], GoalPriority, "Priority")
        for name in ("start_date", "end_date"):
            if name in changes:
                if changes[name] is None:
                    raise ValidationError(f"{name.replace('_', ' ').capitalize()} is required")
                values[name] = changes[name]
        if values.get("start_date", goal.start_date) > values.get("end_date", goal.end_date):
            raise ValidationError("Start date must be on or before end date")
        if "progress" in changes:
            values["progress"] = _require_progress(changes["progress"])
        if "status" in changes:
            target = require_choice(changes["status"], GoalStatus, "Status")
            if target != goal.status:
                GOAL_WORKFLOW.require_transition(goal.status, target, principal.role)
                values["status"] = target

        if not values:
            return goal
        if not self._goals.update(goal_id=goal.goal_id, expected_version=goal.version, values=values):
            raise ConflictError(_STALE)
        return self._own(principal, goal.goal_id)

    def delete_goal(self, principal: Principal, goal_id: int) -> None:
        goal = self._own(principal, goal_id)
        if not self._goals.delete(goal_id=goal.goal_id, expected_version=goal.version):
            raise ConflictError(_STALE)
        logger.info("Goal %s deleted by employee %s", goal.goal_id, principal.employee_id)

    def add_progress(self, principal: Principal, goal_id: int, *, update_text: str, progress) -> PerformanceGoal:
        goal = self._own(principal, goal_id)
        if goal.status != GoalStatus.ACTIVE:
            raise ValidationError("Progress can only be recorded on an active goal")
        update_id = self._goals.add_update(
            goal_id=goal.goal_id,
            expected_version=goal.version,
            update_text=require_non_empty(update_text, "Update text"),
            progress=_require_progress(progress),
            created_by=principal.user_id,
        )
        if update_id is None:
            raise ConflictError(_STALE)
        logger.info("Goal %s progress %s%% (update %s)", goal.goal_id, progress, update_id)
        return self._own(principal, goal.goal_id)

    def list_updates(self, principal: Principal, goal_id: int) -> Sequence[GoalUpdate]:
        goal = self._own(principal, goal_id)
        return self._goals.list_updates(goal_id=goal.goal_id)
