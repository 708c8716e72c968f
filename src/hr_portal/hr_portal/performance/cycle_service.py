from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from ..common.validators import require_choice, require_max_length, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import CycleStatus, CycleType, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..workflow.definitions import REVIEW_CYCLE_WORKFLOW
from .model import ReviewCycle
from .repository import ReviewCycleRepository

logger = logging.getLogger(__name__)

_STALE = "Review cycle was modified by someone else, reload and retry"
_OPENING_STATUSES = frozenset({CycleStatus.DRAFT, CycleStatus.ACTIVE})


def _require_admin(principal: Principal) -> None:
    if principal.role != Role.ADMIN:
        raise AuthorizationError("Admin access required")


def _require_range(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise ValidationError("Start date must be on or before end date")


class ReviewCycleService:
    """Admins run review cycles; everyone may browse them."""

    def __init__(self, cycles: ReviewCycleRepository):
        self._cycles = cycles

    def _load(self, cycle_id: int) -> ReviewCycle:
        cycle = self._cycles.get(cycle_id=int(cycle_id))
        if not cycle:
            raise NotFoundError("Cycle not found")
        return cycle

    def list_cycles(self, principal: Principal, *, status: Optional[CycleStatus] = None) -> Sequence[ReviewCycle]:
        return self._cycles.list_cycles(status=status, limit=DEFAULT_LIST_LIMIT)

    def get_cycle(self, principal: Principal, cycle_id: int) -> ReviewCycle:
        return self._load(cycle_id)

    def create_cycle(
        self,
        principal: Principal,
        *,
        name: str,
        cycle_type: CycleType,
        start_date: date,
        end_date: date,
        status: CycleStatus = CycleStatus.ACTIVE,
    ) -> ReviewCycle:
        _require_admin(principal)
        status = CycleStatus(status)
        if status not in _OPENING_STATUSES:
            raise ValidationError("A new cycle starts as DRAFT or ACTIVE")
        _require_range(start_date, end_date)
        cycle_id = self._cycles.create(
            values={
                "name": require_max_length(require_non_empty(name, "Name"), "Name", 150),
                "cycle_type": CycleType(cycle_type),
                "start_date": start_date,
                "end_date": end_date,
                "status": status,
                "created_by": principal.user_id,
            }
        )
        logger.info("Review cycle %s created by user %s", cycle_id, principal.user_id)
        return self._load(cycle_id)

    def update_cycle(
        self,
        principal: Principal,
        cycle_id: int,
        *,
        expected_version: Optional[int] = None,
        **changes: Any,
    ) -> ReviewCycle:
        _require_admin(principal)
        cycle = self._load(cycle_id)
        if REVIEW_CYCLE_WORKFLOW.is_terminal(cycle.status):
            raise ValidationError(f"Cycle is {cycle.status.value.lower()} and can no longer change")
        if expected_version is not None and int(expected_version) != cycle.version:
            raise ConflictError(_STALE)

        values: dict[str, Any] = {}
        if "name" in changes:
            values["name"] = require_max_length(require_non_empty(changes["name"], "Name"), "Name", 150)
        if "cycle_type" in changes:
            values["cycle_type"] = require_choice(changes["cycle_type"], CycleType, "Type")
        for name in ("start_date", "end_date"):
            if name in changes:
                if changes[name] is None:
                    raise ValidationError(f"{name.replace('_', ' ').capitalize()} is required")
                values[name] = changes[name]
        _require_range(values.get("start_date", cycle.start_date), values.get("end_date", cycle.end_date))
        target = require_choice(changes["status"], CycleStatus, "Status") if "status" in changes else cycle.status
        if target != cycle.status:
            REVIEW_CYCLE_WORKFLOW.require_transition(cycle.status, target, principal.role)
            values["status"] = target

        if not values:
            return cycle
        if not self._cycles.update(cycle_id=cycle.cycle_id, expected_version=cycle.version, values=values):
            raise ConflictError(_STALE)
        logger.info("Review cycle %s updated by user %s (%s)", cycle.cycle_id, principal.user_id, ", ".join(sorted(values)))
        return self._load(cycle.cycle_id)

    def delete_cycle(self, principal: Principal, cycle_id: int) -> None:
        _require_admin(principal)
        cycle = self._load(cycle_id)
        if cycle.review_count:
            raise ValidationError("Cannot delete cycle with existing reviews")
        if not self._cycles.delete(cycle_id=cycle.cycle_id, expected_version=cycle.version):
            if self._load(cycle.cycle_id).review_count:
                raise ValidationError("Cannot delete cycle with existing reviews")
            raise ConflictError(_STALE)
        logger.info("Review cycle %s deleted by user %s", cycle.cycle_id, principal.user_id)
