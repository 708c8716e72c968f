import pytest

from src.hr_portal.hr_portal.core.enums import LeaveStatus, RequestStatus, Role
from src.hr_portal.hr_portal.core.exceptions import InvalidTransitionError
from src.hr_portal.hr_portal.workflow.definitions import (
    ALL_WORKFLOWS,
    LEAVE_WORKFLOW,
    PAYROLL_WORKFLOW,
    REQUEST_WORKFLOW,
)
from src.hr_portal.hr_portal.workflow.transitions import Workflow, rule


def test_every_workflow_starts_from_a_non_terminal_status():
    for wf in ALL_WORKFLOWS:
        assert not wf.is_terminal(wf.initial), wf.name


def test_same_status_is_never_a_transition():
    assert not REQUEST_WORKFLOW.is_valid_transition(RequestStatus.OPEN, RequestStatus.OPEN, Role.ADMIN)


def test_admin_is_not_implicitly_allowed():
    # RESOLVED -> CLOSED lists EMPLOYEE and ADMIN, but not MANAGER
    assert REQUEST_WORKFLOW.is_valid_transition(RequestStatus.RESOLVED, RequestStatus.CLOSED, Role.EMPLOYEE)
    assert REQUEST_WORKFLOW.is_valid_transition(RequestStatus.RESOLVED, RequestStatus.CLOSED, Role.ADMIN)
    assert not REQUEST_WORKFLOW.is_valid_transition(RequestStatus.RESOLVED, RequestStatus.CLOSED, Role.MANAGER)


def test_statuses_given_as_strings_are_coerced():
    assert REQUEST_WORKFLOW.is_valid_transition("OPEN", "IN_PROGRESS", Role.MANAGER)
    assert not REQUEST_WORKFLOW.is_valid_transition("OPEN", "NOPE", Role.MANAGER)


def test_require_transition_reports_the_move():
    with pytest.raises(InvalidTransitionError) as exc:
        PAYROLL_WORKFLOW.require_transition("PENDING", "PAID", Role.ADMIN)
    assert exc.value.from_status == "PENDING"
    assert exc.value.to_status == "PAID"
    assert exc.value.role == "ADMIN"


def test_terminal_status_has_no_next_status():
    assert REQUEST_WORKFLOW.valid_next_statuses(RequestStatus.CLOSED, Role.ADMIN) == []
    assert LEAVE_WORKFLOW.valid_next_statuses(LeaveStatus.CANCELLED, Role.ADMIN) == []


def test_valid_next_statuses_depend_on_role():
    assert set(LEAVE_WORKFLOW.valid_next_statuses(LeaveStatus.PENDING, Role.EMPLOYEE)) == {LeaveStatus.CANCELLED}
    assert set(LEAVE_WORKFLOW.valid_next_statuses(LeaveStatus.PENDING, Role.MANAGER)) == {
        LeaveStatus.APPROVED,
        LeaveStatus.REJECTED,
        LeaveStatus.CANCELLED,
    }


def test_as_table_lists_roles_sorted():
    rows = REQUEST_WORKFLOW.as_table()
    assert len(rows) == len(REQUEST_WORKFLOW.rules)
    closing = next(r for r in rows if r["from"] == "RESOLVED" and r["to"] == "CLOSED")
    assert closing["allowed_roles"] == ["ADMIN", "EMPLOYEE"]


def test_table_rejects_outgoing_rule_from_terminal_status():
    with pytest.raises(ValueError):
        Workflow(
            name="broken",
            status_enum=LeaveStatus,
            initial=LeaveStatus.PENDING,
            terminal=frozenset({LeaveStatus.CANCELLED}),
            rules=(rule(LeaveStatus.CANCELLED, LeaveStatus.PENDING, {Role.ADMIN}),),
        )


def test_table_rejects_duplicate_rules():
    with pytest.raises(ValueError):
        Workflow(
            name="broken",
            status_enum=LeaveStatus,
            initial=LeaveStatus.PENDING,
            terminal=frozenset(),
            rules=(
                rule(LeaveStatus.PENDING, LeaveStatus.APPROVED, {Role.ADMIN}),
                rule(LeaveStatus.PENDING, LeaveStatus.APPROVED, {Role.MANAGER}),
            ),
        )


def _every_move():
    for wf in ALL_WORKFLOWS:
        for src in wf.status_enum:
            for dst in wf.status_enum:
                for role in Role:
                    yield pytest.param(wf, src, dst, role, id=f"{wf.name}:{src.value}->{dst.value}:{role.value}")


@pytest.mark.parametrize("wf, src, dst, role", list(_every_move()))
def test_validity_matches_the_declared_rules(wf, src, dst, role):
    declared = {(r.from_status, r.to_status): r.allowed_roles for r in wf.rules}
    expected = src != dst and role in declared.get((src, dst), frozenset())
    assert wf.is_valid_transition(src, dst, role) is expected
    assert (dst in wf.valid_next_statuses(src, role)) is expected


def _every_terminal_status():
    for wf in ALL_WORKFLOWS:
        for status in sorted(wf.terminal, key=lambda s: s.value):
            for role in Role:
                yield pytest.param(wf, status, role, id=f"{wf.name}:{status.value}:{role.value}")


@pytest.mark.parametrize("wf, status, role", list(_every_terminal_status()))
def test_terminal_statuses_are_dead_ends_for_every_role(wf, status, role):
    assert wf.is_terminal(status)
    assert wf.valid_next_statuses(status, role) == []
    assert not any(wf.is_valid_transition(status, dst, role) for dst in wf.status_enum)
