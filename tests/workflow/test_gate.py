from datetime import datetime

import pytest

from src.hr_portal.hr_portal.core.enums import RequestCategory, RequestStatus, Role
from src.hr_portal.hr_portal.core.exceptions import AuthorizationError
from src.hr_portal.hr_portal.requests.model import EmployeeRequest
from src.hr_portal.hr_portal.users.model import Principal
from src.hr_portal.hr_portal.workflow.gate import (
    RequestAction,
    can_perform,
    principal_can,
    require,
    require_owner_or_management,
    require_roles,
)


def _request(status, *, employee_id=3, assigned_to=None):
    return EmployeeRequest(
        request_id=1,
        employee_id=employee_id,
        category=RequestCategory.GENERAL,
        title="t",
        description="d",
        status=status,
        created_at=datetime(2024, 3, 1, 9, 0),
        assigned_to=assigned_to,
    )


OWNER = Principal(user_id=3, role=Role.EMPLOYEE, employee_id=3)
STRANGER = Principal(user_id=4, role=Role.EMPLOYEE, employee_id=4)
MANAGER = Principal(user_id=2, role=Role.MANAGER)
ADMIN = Principal(user_id=1, role=Role.ADMIN)


def test_owner_and_management_can_view():
    req = _request(RequestStatus.OPEN)
    assert principal_can(OWNER, RequestAction.VIEW, req)
    assert principal_can(MANAGER, RequestAction.VIEW, req)
    assert not principal_can(STRANGER, RequestAction.VIEW, req)


def test_assignee_can_view_and_comment_without_management_role():
    req = _request(RequestStatus.IN_PROGRESS, assigned_to=4)
    assert principal_can(STRANGER, RequestAction.VIEW, req)
    assert principal_can(STRANGER, RequestAction.COMMENT, req)
    assert not principal_can(STRANGER, RequestAction.EDIT, req)


@pytest.mark.parametrize(
    "status, allowed",
    [
        (RequestStatus.OPEN, True),
        (RequestStatus.WAITING_INFO, True),
        (RequestStatus.RESOLVED, False),
        (RequestStatus.CLOSED, False),
    ],
)
def test_owner_edits_only_while_request_is_active(status, allowed):
    assert principal_can(OWNER, RequestAction.EDIT, _request(status)) is allowed


def test_owner_decision_is_final_even_for_management_owner():
    # a manager who raised the request is treated as its owner first
    manager_owner = Principal(user_id=2, role=Role.MANAGER, employee_id=3)
    assert not principal_can(manager_owner, RequestAction.EDIT, _request(RequestStatus.RESOLVED))
    assert principal_can(MANAGER, RequestAction.EDIT, _request(RequestStatus.RESOLVED))


def test_close_rules():
    resolved = _request(RequestStatus.RESOLVED)
    assert principal_can(OWNER, RequestAction.CLOSE, resolved)
    assert principal_can(ADMIN, RequestAction.CLOSE, resolved)
    assert not principal_can(MANAGER, RequestAction.CLOSE, resolved)
    assert not principal_can(OWNER, RequestAction.CLOSE, _request(RequestStatus.IN_PROGRESS))


def test_unknown_action_is_denied():
    assert not can_perform(
        Role.ADMIN,
        "delete",
        status=RequestStatus.OPEN,
        owner_employee_id=3,
        assigned_to=None,
        user_id=1,
        employee_id=None,
    )


def test_require_raises_authorization_error():
    with pytest.raises(AuthorizationError):
        require(STRANGER, RequestAction.VIEW, _request(RequestStatus.OPEN))


def test_require_roles_and_owner_helpers():
    require_roles(ADMIN, {Role.ADMIN})
    with pytest.raises(AuthorizationError):
        require_roles(MANAGER, {Role.ADMIN})

    require_owner_or_management(OWNER, 3)
    require_owner_or_management(MANAGER, 3)
    with pytest.raises(AuthorizationError):
        require_owner_or_management(STRANGER, 3)


def _reference(role, action, status, is_owner, is_assigned):
    # the request permission table written out as plain boolean formulas
    management = role in (Role.MANAGER, Role.ADMIN)
    if action in (RequestAction.VIEW, RequestAction.COMMENT):
        return is_owner or is_assigned or management
    if action == RequestAction.EDIT:
        if is_owner:
            return status in (RequestStatus.OPEN, RequestStatus.IN_PROGRESS, RequestStatus.WAITING_INFO)
        return management
    if action == RequestAction.ASSIGN:
        return management
    if is_owner:
        return status == RequestStatus.RESOLVED
    return role == Role.ADMIN or (is_assigned and status != RequestStatus.OPEN)


@pytest.mark.parametrize("is_assigned", [False, True], ids=["unassigned", "assignee"])
@pytest.mark.parametrize("is_owner", [False, True], ids=["stranger", "owner"])
@pytest.mark.parametrize("action", list(RequestAction), ids=lambda a: a.value)
@pytest.mark.parametrize("status", list(RequestStatus), ids=lambda s: s.value)
@pytest.mark.parametrize("role", list(Role), ids=lambda r: r.value)
def test_gate_matches_reference_table(role, status, action, is_owner, is_assigned):
    allowed = can_perform(
        role,
        action,
        status=status,
        owner_employee_id=3 if is_owner else 4,
        assigned_to=10 if is_assigned else 11,
        user_id=10,
        employee_id=3,
    )
    assert allowed is _reference(role, action, status, is_owner, is_assigned)
