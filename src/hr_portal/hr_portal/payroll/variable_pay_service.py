from __future__ import annotations

from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import clean_optional, require_month, require_non_empty, require_positive_amount
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_PAYROLL_YEAR, MIN_PAYROLL_YEAR
from ..core.enums import MANAGEMENT_ROLES, VariablePayStatus, VariablePayType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..users.repository import EmployeeRepository
from ..workflow.definitions import VARIABLE_PAY_WORKFLOW
from ..workflow.gate import require_roles
from .audit import AuditTrail
from .model import VariablePayEntry
from .repository import VariablePayRepository


class VariablePayService:
    """Bonus/commission style entries; only APPROVED ones reach the calculator."""

    def __init__(self, entries: VariablePayRepository, employees: EmployeeRepository, audit: AuditTrail):
        self._entries = entries
        self._employees = employees
        self._audit = audit

    def _load(self, entry_id: int) -> VariablePayEntry:
        entry = self._entries.get(entry_id=int(entry_id))
        if not entry:
            raise NotFoundError("Variable pay entry not found")
        return entry

    def list_entries(
        self,
        principal: Principal,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[VariablePayStatus] = None,
    ) -> Sequence[VariablePayEntry]:
        if not principal.is_management:
            if principal.employee_id is None:
                return []
            employee_id = principal.employee_id
        return self._entries.list_entries(
            employee_id=employee_id, month=month, year=year, status=status, limit=DEFAULT_LIST_LIMIT
        )

    def create_entry(
        self,
        principal: Principal,
        *,
        employee_id: int,
        month: int,
        year: int,
        amount,
        pay_type: VariablePayType,
        description: str,
    ) -> VariablePayEntry:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        month, year = require_month(month, year, min_year=MIN_PAYROLL_YEAR, max_year=MAX_PAYROLL_YEAR)
        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")

        entry_id = self._entries.create(
            employee_id=int(employee_id),
            month=month,
            year=year,
            amount=require_positive_amount(amount, "Amount"),
            pay_type=VariablePayType(pay_type),
            description=require_non_empty(description, "Description"),
            submitted_by=principal.user_id,
        )
        return self._load(entry_id)

    def decide(
        self,
        principal: Principal,
        entry_id: int,
        *,
        status: VariablePayStatus,
        rejection_reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> VariablePayEntry:
        entry = self._load(entry_id)
        if expected_version is not None and int(expected_version) != entry.version:
            raise ConflictError("Variable pay entry was modified by someone else, reload and retry")
        target = VariablePayStatus(status)
        VARIABLE_PAY_WORKFLOW.require_transition(entry.status, target, principal.role)

        values: dict[str, Any] = {"status": target, "decided_by": principal.user_id, "decided_at": now_local()}
        if target == VariablePayStatus.REJECTED:
            values["rejection_reason"] = clean_optional(rejection_reason)
        if not self._entries.update(entry_id=entry.entry_id, expected_version=entry.version, values=values):
            raise ConflictError("Variable pay entry was modified by someone else, reload and retry")

        self._audit.record(
            principal,
            f"VARIABLE_PAY_ENTRY_{target.value}",
            employee_id=entry.employee_id,
            entry_id=entry.entry_id,
            amount=entry.amount,
            month=entry.month,
            year=entry.year,
        )
        return self._load(entry.entry_id)

    def delete_entry(self, principal: Principal, entry_id: int) -> None:
        """Administrative removal; approved entries are already part of payroll."""
        entry = self._load(entry_id)
        if not (principal.is_admin or entry.submitted_by == principal.user_id):
            raise AuthorizationError("Only the submitter or an admin can delete this entry")
        if entry.status == VariablePayStatus.APPROVED:
            raise ValidationError("Approved entries cannot be deleted")
        if not self._entries.delete(entry_id=entry.entry_id):
            raise NotFoundError("Variable pay entry not found")
        self._audit.record(
            principal,
            "VARIABLE_PAY_ENTRY_DELETED",
            employee_id=entry.employee_id,
            entry_id=entry.entry_id,
            amount=entry.amount,
        )
