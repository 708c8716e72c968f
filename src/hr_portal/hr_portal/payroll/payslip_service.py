from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import MANAGEMENT_ROLES, PayrollStatus, PayslipStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..users.model import Principal
from ..users.repository import EmployeeRepository
from ..workflow.definitions import PAYSLIP_WORKFLOW
from ..workflow.gate import require_owner_or_management, require_roles
from .audit import AuditTrail
from .calculator.base import DEDUCTION_FIELDS, EARNING_FIELDS
from .model import Payslip
from .repository import PayrollInputRepository, PayrollRepository, PayslipRepository

PAYABLE_STATUSES = frozenset({PayrollStatus.PROCESSED, PayrollStatus.PAID})


class PayslipService:
    """Payslips are snapshots of a processed payroll; rendering is left to the client."""

    def __init__(
        self,
        payslips: PayslipRepository,
        payrolls: PayrollRepository,
        inputs: PayrollInputRepository,
        employees: EmployeeRepository,
        audit: AuditTrail,
    ):
        self._payslips = payslips
        self._payrolls = payrolls
        self._inputs = inputs
        self._employees = employees
        self._audit = audit

    def _load(self, payslip_id: int) -> Payslip:
        payslip = self._payslips.get(payslip_id=int(payslip_id))
        if not payslip:
            raise NotFoundError("Payslip not found")
        return payslip

    def list_payslips(
        self,
        principal: Principal,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Sequence[Payslip]:
        if not principal.is_management:
            if principal.employee_id is None:
                return []
            employee_id = principal.employee_id
        return self._payslips.list_payslips(employee_id=employee_id, month=month, year=year, limit=DEFAULT_LIST_LIMIT)

    def generate(self, principal: Principal, *, payroll_id: int) -> Payslip:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        payroll = self._payrolls.get(payroll_id=int(payroll_id))
        if not payroll:
            raise NotFoundError("Payroll record not found")
        if payroll.status not in PAYABLE_STATUSES:
            raise ValidationError("Payslips can only be generated for processed or paid payroll")
        if self._payslips.find(employee_id=payroll.employee_id, month=payroll.month, year=payroll.year):
            raise ValidationError("Payslip already generated for this period")

        employee = self._employees.get_by_id(payroll.employee_id)
        code = employee.employee_code if employee else str(payroll.employee_id)
        snapshot = {
            "employee_name": employee.full_name if employee else payroll.employee_name,
            "employee_code": code,
            "department": employee.department_name if employee else payroll.department_name,
            "position": employee.position if employee else None,
            "month": payroll.month,
            "year": payroll.year,
            "basic_salary": payroll.basic_salary,
            "total_deductions": payroll.deductions,
            "net_salary": payroll.net_salary,
        }
        item = self._inputs.find(employee_id=payroll.employee_id, month=payroll.month, year=payroll.year)
        if item:
            snapshot.update({k: getattr(item, k) for k in EARNING_FIELDS + DEDUCTION_FIELDS})
            snapshot.update(
                total_earnings=item.total_earnings,
                working_days=item.working_days,
                present_days=item.present_days,
                leave_days=item.leave_days,
            )

        payslip_id = self._payslips.create(
            payroll_id=payroll.payroll_id,
            employee_id=payroll.employee_id,
            month=payroll.month,
            year=payroll.year,
            file_name=f"payslip_{code}_{payroll.year}_{payroll.month:02d}.pdf",
            generated_by=principal.user_id,
            snapshot=snapshot,
        )
        self._audit.record(
            principal,
            "PAYSLIP_GENERATED",
            payroll_id=payroll.payroll_id,
            employee_id=payroll.employee_id,
            payslip_id=payslip_id,
        )
        return self._load(payslip_id)

    def download(self, principal: Principal, payslip_id: int) -> Payslip:
        """Return the payslip; the first download moves it GENERATED -> DOWNLOADED."""
        payslip = self._load(payslip_id)
        require_owner_or_management(principal, payslip.employee_id)
        if payslip.status == PayslipStatus.ARCHIVED:
            raise ValidationError("Payslip is archived")
        if payslip.status == PayslipStatus.DOWNLOADED:
            return payslip

        PAYSLIP_WORKFLOW.require_transition(payslip.status, PayslipStatus.DOWNLOADED, principal.role)
        if not self._payslips.update(
            payslip_id=payslip.payslip_id,
            expected_version=payslip.version,
            values={"status": PayslipStatus.DOWNLOADED, "downloaded_at": now_local()},
        ):
            current = self._load(payslip.payslip_id)
            if current.status != PayslipStatus.DOWNLOADED:
                raise ConflictError("Payslip was modified by someone else, reload and retry")
            return current
        return self._load(payslip.payslip_id)

    def archive(self, principal: Principal, payslip_id: int) -> Payslip:
        payslip = self._load(payslip_id)
        PAYSLIP_WORKFLOW.require_transition(payslip.status, PayslipStatus.ARCHIVED, principal.role)
        if not self._payslips.update(
            payslip_id=payslip.payslip_id, expected_version=payslip.version, values={"status": PayslipStatus.ARCHIVED}
        ):
            raise ConflictError("Payslip was modified by someone else, reload and retry")
        return self._load(payslip.payslip_id)
