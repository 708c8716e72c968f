from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.aggregation import count_by_status
from ..common.datetime_utils import now_local
from ..common.validators import clean_optional, require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import MANAGEMENT_ROLES, LeaveStatus, LeaveType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..workflow.definitions import LEAVE_WORKFLOW
from ..workflow.gate import require_owner_or_management, require_roles
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

    def _load(self, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get(leave_id=int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def apply(
        self,
        principal: Principal,
        *,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> LeaveRequest:
        if principal.employee_id is None:
            raise AuthorizationError("Only employees can apply for leave")
        if start_date > end_date:
            raise ValidationError("Start date must be on or before end date")
        leave_id = self._leaves.create(
            employee_id=principal.employee_id,
            leave_type=LeaveType(leave_type),
            start_date=start_date,
            end_date=end_date,
            reason=require_non_empty(reason, "Reason"),
        )
        logger.info("Leave %s requested by employee %s (%s..%s)", leave_id, principal.employee_id, start_date, end_date)
        return self._load(leave_id)

    def list_requests(self, principal: Principal, *, status: Optional[LeaveStatus] = None) -> Sequence[LeaveRequest]:
        if principal.is_management:
            return self._leaves.list_requests(status=status, limit=DEFAULT_LIST_LIMIT)
        if principal.employee_id is None:
            return []
        return self._leaves.list_requests(employee_id=principal.employee_id, status=status, limit=DEFAULT_LIST_LIMIT)

    def get_request(self, principal: Principal, leave_id: int) -> LeaveRequest:
        leave = self._load(leave_id)
        require_owner_or_management(principal, leave.employee_id)
        return leave

    def change_status(
        self,
        principal: Principal,
        leave_id: int,
        *,
        status: LeaveStatus,
        comments: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> LeaveRequest:
        """Approve, reject or cancel one leave request.

        Employees may only cancel their own requests; approvals and rejections
        need a manager or admin.
        """
        leave = self._load(leave_id)
        target = LeaveStatus(status)
        if target == LeaveStatus.CANCELLED:
            require_owner_or_management(principal, leave.employee_id)
        else:
            require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")

        if expected_version is not None and int(expected_version) != leave.version:
            raise ConflictError("Leave request was modified by someone else, reload and retry")
        LEAVE_WORKFLOW.require_transition(leave.status, target, principal.role)

        values = {"status": target}
        if target in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            values["approved_by"] = principal.user_id
            values["approved_at"] = now_local()
        note = clean_optional(comments)
        if note is not None:
            values["comments"] = note

        if not self._leaves.update(leave_id=leave.leave_id, expected_version=leave.version, values=values):
            raise ConflictError("Leave request was modified by someone else, reload and retry")
        logger.info(
            "Leave %s: %s -> %s by user %s (%s)",
            leave.leave_id,
            leave.status.value,
            target.value,
            principal.user_id,
            principal.role.value,
        )
        return self._load(leave.leave_id)

    def delete_request(self, principal: Principal, leave_id: int) -> None:
        leave = self._load(leave_id)
        if not (principal.is_admin or principal.owns(leave.employee_id)):
            raise AuthorizationError("Only the requester or an admin can delete this leave request")
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Only pending leave requests can be deleted")
        if not self._leaves.delete(leave_id=leave.leave_id, expected_version=leave.version):
            raise ConflictError("Leave request was modified by someone else, reload and retry")
        logger.info("Leave %s deleted by user %s", leave.leave_id, principal.user_id)

    def stats(self) -> dict[str, int]:
        return count_by_status(self._leaves.count_by_status(), LeaveStatus)
