from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.aggregation import count_by_status, sum_by
from ..common.datetime_utils import month_bounds, now_local
from ..common.money import ZERO, money_sum, to_money
from ..common.validators import clean_optional, require_month
from ..core.constants import DEFAULT_LIST_LIMIT, MAX_PAYROLL_YEAR, MIN_PAYROLL_YEAR
from ..core.enums import (
    MANAGEMENT_ROLES,
    CorrectionStatus,
    PayrollInputStatus,
    PayrollStatus,
    Role,
    VariablePayStatus,
)
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from ..users.model import Employee, Principal
from ..users.repository import EmployeeRepository
from ..workflow.definitions import PAYROLL_INPUT_WORKFLOW, PAYROLL_WORKFLOW
from ..workflow.gate import require_owner_or_management, require_roles
from .audit import AuditTrail
from .calculator.base import (
    DEDUCTION_FIELDS,
    EARNING_FIELDS,
    CalculationOptions,
    EmployeePayrollData,
    PayrollCalculationResult,
    PayrollCalculator,
    ValidationReport,
    compute_totals,
)
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Payroll, PayrollInput
from .repository import CorrectionRepository, PayrollInputRepository, PayrollRepository, VariablePayRepository

logger = logging.getLogger(__name__)

_STALE = "Payroll record was modified by someone else, reload and retry"

EDITABLE_INPUT_FIELDS = EARNING_FIELDS + DEDUCTION_FIELDS


def _record_values(components: dict[str, Any]) -> dict[str, Decimal]:
    """Payroll record columns derived from a component breakdown."""
    basic = to_money(components["basic_salary"])
    return {
        "basic_salary": basic,
        "allowances": to_money(components["total_earnings"]) - basic,
        "deductions": to_money(components["total_deductions"]),
        "net_salary": to_money(components["net_salary"]),
    }


def _input_values(result: PayrollCalculationResult) -> dict[str, Any]:
    values = {k: getattr(result, k) for k in EDITABLE_INPUT_FIELDS}
    values.update(
        total_earnings=result.total_earnings,
        total_deductions=result.total_deductions,
        net_salary=result.net_salary,
        working_days=result.working_days,
        present_days=result.present_days,
        leave_days=result.leave_days,
    )
    return values


class PayrollService:
    """Payroll records: calculation preview, manual creation, monthly run, status, dashboard."""

    def __init__(
        self,
        payrolls: PayrollRepository,
        inputs: PayrollInputRepository,
        variable_pay: VariablePayRepository,
        corrections: CorrectionRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        audit: AuditTrail,
        *,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._payrolls = payrolls
        self._inputs = inputs
        self._variable_pay = variable_pay
        self._corrections = corrections
        self._employees = employees
        self._attendance = attendance
        self._audit = audit
        self._calculator = calculator or StandardPayrollCalculator()

    def _load(self, payroll_id: int) -> Payroll:
        payroll = self._payrolls.get(payroll_id=int(payroll_id))
        if not payroll:
            raise NotFoundError("Payroll record not found")
        return payroll

    def _employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _payroll_data(
        self,
        employee: Employee,
        month: int,
        year: int,
        *,
        basic_salary: Optional[Decimal] = None,
        bonus: Decimal = ZERO,
        allowances: Decimal = ZERO,
        other_deductions: Decimal = ZERO,
    ) -> EmployeePayrollData:
        start, end = month_bounds(month, year)
        return EmployeePayrollData(
            employee_id=employee.employee_id,
            month=month,
            year=year,
            basic_salary=basic_salary if basic_salary is not None else employee.salary,
            attendance=self._attendance.list_for_employee_between(employee.employee_id, start, end),
            variable_pay=self._variable_pay.list_entries(
                employee_id=employee.employee_id, month=month, year=year, status=VariablePayStatus.APPROVED
            ),
            hire_date=employee.hire_date,
            exit_date=employee.exit_date,
            bonus=to_money(bonus),
            allowances=to_money(allowances),
            other_deductions=to_money(other_deductions),
        )

    def calculate(
        self,
        principal: Principal,
        *,
        employee_id: int,
        month: int,
        year: int,
        options: Optional[CalculationOptions] = None,
    ) -> tuple[PayrollCalculationResult, ValidationReport]:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        month, year = require_month(month, year, min_year=MIN_PAYROLL_YEAR, max_year=MAX_PAYROLL_YEAR)
        employee = self._employee(employee_id)
        result = self._calculator.calculate(self._payroll_data(employee, month, year), options)
        return result, self._calculator.validate(result)

    def list_payrolls(
        self,
        principal: Principal,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[Payroll]:
        if not principal.is_management:
            if principal.employee_id is None:
                return []
            employee_id = principal.employee_id
        return self._payrolls.list_payrolls(
            employee_id=employee_id, month=month, year=year, status=status, limit=DEFAULT_LIST_LIMIT
        )

    def get_payroll(self, principal: Principal, payroll_id: int) -> Payroll:
        payroll = self._load(payroll_id)
        require_owner_or_management(principal, payroll.employee_id)
        return payroll

    def create_payroll(
        self,
        principal: Principal,
        *,
        employee_id: int,
        month: int,
        year: int,
        basic_salary: Optional[Decimal] = None,
        bonus: Decimal = ZERO,
        allowances: Decimal = ZERO,
        other_deductions: Decimal = ZERO,
        options: Optional[CalculationOptions] = None,
    ) -> Payroll:
        """Create a PENDING payroll record plus its DRAFT input for one employee/month."""
        require_roles(principal, {Role.ADMIN}, "Admin access required")
        month, year = require_month(month, year, min_year=MIN_PAYROLL_YEAR, max_year=MAX_PAYROLL_YEAR)
        employee = self._employee(employee_id)
        if self._payrolls.find(employee_id=employee.employee_id, month=month, year=year):
            raise ValidationError("Payroll already exists for this employee and period")

        data = self._payroll_data(
            employee,
            month,
            year,
            basic_salary=basic_salary,
            bonus=bonus,
            allowances=allowances,
            other_deductions=other_deductions,
        )
        result = self._calculator.calculate(data, options)
        report = self._calculator.validate(result)
        if not report.is_valid:
            raise ValidationError("; ".join(report.errors))

        period = {"employee_id": employee.employee_id, "month": month, "year": year}
        input_values = _input_values(result)
        payroll_id, _ = self._payrolls.save_with_input(
            payroll_values={**period, "status": PayrollStatus.PENDING, **_record_values(input_values)},
            input_values={**period, "status": PayrollInputStatus.DRAFT, **input_values},
        )
        self._audit.record(
            principal, "PAYROLL_CREATED", payroll_id=payroll_id, employee_id=employee.employee_id,
            month=month, year=year, net_salary=result.net_salary,
        )
        return self._load(payroll_id)

    def update_status(
        self,
        principal: Principal,
        payroll_id: int,
        *,
        status: PayrollStatus,
        expected_version: Optional[int] = None,
    ) -> Payroll:
        payroll = self._load(payroll_id)
        if expected_version is not None and int(expected_version) != payroll.version:
            raise ConflictError(_STALE)
        target = PayrollStatus(status)
        PAYROLL_WORKFLOW.require_transition(payroll.status, target, principal.role)

        values: dict[str, Any] = {"status": target}
        if target == PayrollStatus.PAID:
            values["paid_at"] = now_local()
        if not self._payrolls.update(payroll_id=payroll.payroll_id, expected_version=payroll.version, values=values):
            raise ConflictError(_STALE)

        self._audit.record(
            principal,
            f"PAYROLL_{target.value}",
            payroll_id=payroll.payroll_id,
            employee_id=payroll.employee_id,
            previous_status=payroll.status,
        )
        return self._load(payroll.payroll_id)

    def process(
        self,
        principal: Principal,
        *,
        month: int,
        year: int,
        employee_ids: Optional[Sequence[int]] = None,
        options: Optional[CalculationOptions] = None,
    ) -> dict[str, Any]:
        """Monthly run: calculate and store every selected active employee.

        One employee's failure is recorded in ``errors`` and the run carries on.
        """
        require_roles(principal, {Role.ADMIN}, "Admin access required")
        month, year = require_month(month, year, min_year=MIN_PAYROLL_YEAR, max_year=MAX_PAYROLL_YEAR)
        employees = self._employees.list_employees(active_only=True, employee_ids=employee_ids or None)

        results: list[PayrollCalculationResult] = []
        rows: list[dict] = []
        errors: list[dict] = []
        for employee in employees:
            try:
                result = self._calculator.calculate(self._payroll_data(employee, month, year), options)
                report = self._calculator.validate(result)
                if not report.is_valid:
                    errors.append({"employee_id": employee.employee_id, "name": employee.full_name, "errors": list(report.errors)})
                    continue
                payroll_id = self._store_processed(principal, employee, month, year, result)
            except DomainError as e:
                logger.warning("Payroll run %02d/%s skipped employee %s: %s", month, year, employee.employee_id, e)
                errors.append({"employee_id": employee.employee_id, "name": employee.full_name, "errors": [str(e)]})
                continue

            results.append(result)
            rows.append(
                {
                    "employee_id": employee.employee_id,
                    "name": employee.full_name,
                    "payroll_id": payroll_id,
                    "result": result,
                    "warnings": list(report.warnings),
                }
            )

        summary = self._calculator.summarize(results, month=month, year=year)
        logger.info("Payroll run %02d/%s: %s of %s employees processed", month, year, len(results), len(employees))
        return {
            "processed": len(results),
            "total": len(employees),
            "results": rows,
            "errors": errors,
            "summary": summary,
        }

    def _store_processed(
        self,
        principal: Principal,
        employee: Employee,
        month: int,
        year: int,
        result: PayrollCalculationResult,
    ) -> int:
        period = {"employee_id": employee.employee_id, "month": month, "year": year}
        components = _input_values(result)
        payroll_values: dict[str, Any] = {**_record_values(components), "status": PayrollStatus.PROCESSED}
        input_values: dict[str, Any] = {
            **components,
            "status": PayrollInputStatus.PROCESSED,
            "processed_by": principal.user_id,
            "processed_at": now_local(),
        }

        payroll = self._payrolls.find(**period)
        if payroll is not None and payroll.status == PayrollStatus.PAID:
            raise ValidationError("Payroll already paid for this period")
        existing = self._inputs.find(**period)
        if payroll is None:
            payroll_values.update(period)
        if existing is None:
            input_values.update(period)

        saved = self._payrolls.save_with_input(
            payroll_values=payroll_values,
            input_values=input_values,
            payroll_id=payroll.payroll_id if payroll else None,
            payroll_version=payroll.version if payroll else None,
            input_id=existing.input_id if existing else None,
            input_version=existing.version if existing else None,
        )
        if saved is None:
            raise ConflictError(_STALE)
        payroll_id = saved[0]

        self._audit.record(
            principal,
            "PAYROLL_PROCESSED",
            payroll_id=payroll_id,
            employee_id=employee.employee_id,
            month=month,
            year=year,
            net_salary=result.net_salary,
        )
        return payroll_id

    def history(self, principal: Principal, payroll_id: int):
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        return self._audit.history(self._load(payroll_id).payroll_id)

    def dashboard(self, principal: Principal, *, month: int, year: int) -> dict[str, Any]:
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        month, year = require_month(month, year, min_year=MIN_PAYROLL_YEAR, max_year=MAX_PAYROLL_YEAR)

        by_department = self._payrolls.net_by_department(month=month, year=year)
        processed = [
            r for r in by_department if str(getattr(r["status"], "value", r["status"])) in {"PROCESSED", "PAID"}
        ]
        return {
            "month": month,
            "year": year,
            "pending_variable_pay": count_by_status(self._variable_pay.count_by_status(), VariablePayStatus)["PENDING"],
            "pending_corrections": count_by_status(self._corrections.count_by_status(), CorrectionStatus)["PENDING"],
            "payroll_by_status": count_by_status(self._payrolls.count_by_status(month=month, year=year), PayrollStatus),
            "processed_count": len(processed),
            "processed_net_total": money_sum(r["net_salary"] for r in processed),
            "net_by_department": sum_by(by_department, key="department", value="net_salary"),
        }


class PayrollInputService:
    """Per-employee component breakdown and its approval lifecycle."""

    def __init__(self, inputs: PayrollInputRepository, payrolls: PayrollRepository, audit: AuditTrail):
        self._inputs = inputs
        self._payrolls = payrolls
        self._audit = audit

    def _load(self, input_id: int) -> PayrollInput:
        item = self._inputs.get(input_id=int(input_id))
        if not item:
            raise NotFoundError("Payroll input not found")
        return item

    def list_inputs(
        self,
        principal: Principal,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollInputStatus] = None,
    ) -> Sequence[PayrollInput]:
        if not principal.is_management:
            if principal.employee_id is None:
                return []
            employee_id = principal.employee_id
        return self._inputs.list_inputs(
            employee_id=employee_id, month=month, year=year, status=status, limit=DEFAULT_LIST_LIMIT
        )

    def get_input(self, principal: Principal, input_id: int) -> PayrollInput:
        item = self._load(input_id)
        require_owner_or_management(principal, item.employee_id)
        return item

    def update_input(
        self,
        principal: Principal,
        input_id: int,
        *,
        changes: dict[str, Any],
        notes: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> PayrollInput:
        """Edit components; totals and the linked payroll record are recomputed."""
        require_roles(principal, MANAGEMENT_ROLES, "Manager or Admin access required")
        item = self._load(input_id)
        if item.status == PayrollInputStatus.PROCESSED:
            raise ValidationError("Processed payroll inputs cannot be edited")
        if expected_version is not None and int(expected_version) != item.version:
            raise ConflictError(_STALE)

        unknown = set(changes) - set(EDITABLE_INPUT_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown payroll components: {', '.join(sorted(unknown))}")
        if not changes and notes is None:
            raise ValidationError("No valid fields to update")

        payroll = self._payrolls.get(payroll_id=item.payroll_id)
        if payroll and payroll.status == PayrollStatus.PAID:
            raise ValidationError("Payroll already paid for this period")

        components = {k: to_money(getattr(item, k)) for k in EDITABLE_INPUT_FIELDS}
        for k, v in changes.items():
            amount = to_money(v)
            if amount < 0:
                raise ValidationError(f"{k} cannot be negative")
            components[k] = amount
        total_earnings, total_deductions, net = compute_totals(components)

        values: dict[str, Any] = {
            **components,
            "total_earnings": total_earnings,
            "total_deductions": total_deductions,
            "net_salary": net,
        }
        if notes is not None:
            values["notes"] = clean_optional(notes)
        if payroll is None:
            written = self._inputs.update(input_id=item.input_id, expected_version=item.version, values=values)
        else:
            written = self._payrolls.save_with_input(
                payroll_values=_record_values(values),
                input_values=values,
                payroll_id=payroll.payroll_id,
                payroll_version=payroll.version,
                input_id=item.input_id,
                input_version=item.version,
            )
        if not written:
            raise ConflictError(_STALE)

        updated = self._load(item.input_id)

        self._audit.record(
            principal,
            "PAYROLL_INPUT_UPDATED",
            payroll_id=item.payroll_id,
            employee_id=item.employee_id,
            changes={k: to_money(v) for k, v in changes.items()},
            net_salary=net,
        )
        return updated

    def change_status(
        self,
        principal: Principal,
        input_id: int,
        *,
        status: PayrollInputStatus,
        expected_version: Optional[int] = None,
    ) -> PayrollInput:
        item = self._load(input_id)
        if expected_version is not None and int(expected_version) != item.version:
            raise ConflictError(_STALE)
        target = PayrollInputStatus(status)
        PAYROLL_INPUT_WORKFLOW.require_transition(item.status, target, principal.role)

        values: dict[str, Any] = {"status": target}
        if target == PayrollInputStatus.APPROVED:
            values.update(approved_by=principal.user_id, approved_at=now_local())
        elif target == PayrollInputStatus.PROCESSED:
            values.update(processed_by=principal.user_id, processed_at=now_local())
        if not self._inputs.update(input_id=item.input_id, expected_version=item.version, values=values):
            raise ConflictError(_STALE)

        self._audit.record(
            principal,
            f"PAYROLL_INPUT_{target.value}",
            payroll_id=item.payroll_id,
            employee_id=item.employee_id,
            previous_status=item.status,
        )
        return self._load(item.input_id)

    def delete_input(self, principal: Principal, input_id: int) -> None:
        require_roles(principal, {Role.ADMIN}, "Admin access required")
        item = self._load(input_id)
        if item.status == PayrollInputStatus.PROCESSED:
            raise ValidationError("Processed payroll inputs cannot be deleted")
        if not self._inputs.delete(input_id=item.input_id):
            raise NotFoundError("Payroll input not found")
        self._audit.record(
            principal, "PAYROLL_INPUT_DELETED", payroll_id=item.payroll_id, employee_id=item.employee_id
        )
