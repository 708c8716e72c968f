"""Ownership/role gate for employee requests.

Each action is one ``ActionPolicy`` row evaluated over three facts: whether the
caller owns the request, whether it is assigned to them, and their role.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.enums import MANAGEMENT_ROLES, RequestStatus, Role
from ..core.exceptions import AuthorizationError
from ..users.model import Principal

ALL_REQUEST_STATUSES = frozenset(RequestStatus)
NO_STATUSES: frozenset[RequestStatus] = frozenset()


class RequestAction(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    ASSIGN = "assign"
    COMMENT = "comment"
    CLOSE = "close"


@dataclass(frozen=True)
class ActionPolicy:
    # Statuses in which the owner may act. When owner_decides is set the
    # owner's answer is final, even for a manager or admin owner.
    owner_statuses: frozenset[RequestStatus]
    owner_decides: bool
    assignee_statuses: frozenset[RequestStatus]
    roles: frozenset[Role]

    def permits(self, *, role: Role, status: RequestStatus, is_owner: bool, is_assignee: bool) -> bool:
        if is_owner:
            if status in self.owner_statuses:
                return True
            if self.owner_decides:
                return False
        if is_assignee and status in self.assignee_statuses:
            return True
        return role in self.roles


REQUEST_POLICIES: dict[RequestAction, ActionPolicy] = {
    RequestAction.VIEW: ActionPolicy(ALL_REQUEST_STATUSES, False, ALL_REQUEST_STATUSES, MANAGEMENT_ROLES),
    RequestAction.EDIT: ActionPolicy(
        frozenset({RequestStatus.OPEN, RequestStatus.IN_PROGRESS, RequestStatus.WAITING_INFO}),
        True,
        NO_STATUSES,
        MANAGEMENT_ROLES,
    ),
    RequestAction.ASSIGN: ActionPolicy(NO_STATUSES, False, NO_STATUSES, MANAGEMENT_ROLES),
    RequestAction.COMMENT: ActionPolicy(ALL_REQUEST_STATUSES, False, ALL_REQUEST_STATUSES, MANAGEMENT_ROLES),
    RequestAction.CLOSE: ActionPolicy(
        frozenset({RequestStatus.RESOLVED}),
        True,
        ALL_REQUEST_STATUSES - {RequestStatus.OPEN},
        frozenset({Role.ADMIN}),
    ),
}


def can_perform(
    role: Role,
    action: RequestAction,
    *,
    status: RequestStatus,
    owner_employee_id: Optional[int],
    assigned_to: Optional[int],
    user_id: Optional[int],
    employee_id: Optional[int],
) -> bool:
    """Pure permission check for one action on one request."""
    try:
        policy = REQUEST_POLICIES[RequestAction(action)]
    except (KeyError, ValueError):
        return False
    is_owner = employee_id is not None and owner_employee_id is not None and int(employee_id) == int(owner_employee_id)
    is_assignee = assigned_to is not None and user_id is not None and int(assigned_to) == int(user_id)
    return policy.permits(role=role, status=RequestStatus(status), is_owner=is_owner, is_assignee=is_assignee)


def principal_can(principal: Principal, action: RequestAction, request) -> bool:
    return can_perform(
        principal.role,
        action,
        status=request.status,
        owner_employee_id=request.employee_id,
        assigned_to=request.assigned_to,
        user_id=principal.user_id,
        employee_id=principal.employee_id,
    )


def require(principal: Principal, action: RequestAction, request) -> None:
    if not principal_can(principal, action, request):
        raise AuthorizationError(f"Not allowed to {RequestAction(action).value} this request")


def require_roles(principal: Principal, roles, message: str = "Insufficient role") -> None:
    if principal.role not in roles:
        raise AuthorizationError(message)


def require_owner_or_management(principal: Principal, owner_employee_id: Optional[int]) -> None:
    if principal.is_management or principal.owns(owner_employee_id):
        return
    raise AuthorizationError("Forbidden")
