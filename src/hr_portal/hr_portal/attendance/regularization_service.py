from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import clean_optional, require_choice, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import MANAGEMENT_ROLES, RegularizationStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..workflow.definitions import REGULARIZATION_WORKFLOW
from ..workflow.gate import require_owner_or_management, require_roles
from .model import RegularizationRequest
from .repository import AttendanceRepository, RegularizationRepository

logger = logging.getLogger(__name__)

_STALE = "Regularization request was modified by someone else, reload and retry"


class RegularizationService:
    def __init__(self, requests: RegularizationRepository, attendance: AttendanceRepository):
        self._requests = requests
        self._attendance = attendance

    def _load(self, request_id: int) -> RegularizationRequest:
        req = self._requests.get(request_id=int(request_id))
        if not req:
            raise NotFoundError("Regularization request not found")
        return req

    def request(self, principal: Principal, *, work_date: date, reason: str) -> RegularizationRequest:
        if principal.employee_id is None:
            raise NotFoundError("Employee not found")
        reason = require_non_empty(reason, "Reason")
        if self._requests.find(employee_id=principal.employee_id, work_date=work_date):
            raise ValidationError("Request already exists for this date")
        if not self._attendance.find(employee_id=principal.employee_id, work_date=work_date):
            raise ValidationError("No attendance record found for this date")

        request_id = self._requests.create(employee_id=principal.employee_id, work_date=work_date, reason=reason)
        logger.info("Regularization %s requested by employee %s for %s", request_id, principal.employee_id, work_date)
        return self._load(request_id)

    def list_requests(
        self, principal: Principal, *, status: Optional[RegularizationStatus] = None
    ) -> Sequence[RegularizationRequest]:
        if principal.is_management:
            return self._requests.list_requests(status=status, limit=DEFAULT_LIST_LIMIT)
        if principal.employee_id is None:
            return []
        return self._requests.list_requests(employee_id=principal.employee_id, status=status, limit=DEFAULT_LIST_LIMIT)

    def get_request(self, principal: Principal, request_id: int) -> RegularizationRequest:
        req = self._load(request_id)
        require_owner_or_management(principal, req.employee_id)
        return req

    def review(
        self,
        principal: Principal,
        request_id: int,
        *,
        status: RegularizationStatus,
        comments: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> RegularizationRequest:
        """Approve or reject a request; approval marks the attendance day as regularized."""
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        req = self._load(request_id)
        target = require_choice(status, RegularizationStatus, "Status")
        if req.status != RegularizationStatus.PENDING:
            raise ValidationError("Request already reviewed")
        if expected_version is not None and int(expected_version) != req.version:
            raise ConflictError(_STALE)
        REGULARIZATION_WORKFLOW.require_transition(req.status, target, principal.role)

        reviewed_at = now_local()
        values: dict[str, Any] = {
            "status": target,
            "reviewed_by": principal.user_id,
            "reviewed_at": reviewed_at,
            "review_comments": clean_optional(comments),
        }
        attendance = None
        if target == RegularizationStatus.APPROVED:
            attendance = self._attendance.find(employee_id=req.employee_id, work_date=req.work_date)
            if attendance is None:
                raise ValidationError("No attendance record found for this date")

        written = self._requests.review(
            request_id=req.request_id,
            expected_version=req.version,
            values=values,
            attendance_id=attendance.attendance_id if attendance else None,
            attendance_version=attendance.version if attendance else None,
            attendance_values=(
                {"is_regularized": True, "regularized_by": principal.user_id, "regularized_at": reviewed_at}
                if attendance
                else None
            ),
        )
        if not written:
            raise ConflictError(_STALE)
        logger.info(
            "Regularization %s: %s -> %s by user %s",
            req.request_id,
            req.status.value,
            target.value,
            principal.user_id,
        )
        return self._load(req.request_id)
