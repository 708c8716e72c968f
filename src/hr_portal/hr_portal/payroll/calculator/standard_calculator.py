from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ...attendance.model import AttendanceRecord
from ...common.datetime_utils import month_bounds, working_days_between, working_days_in_month
from ...common.money import ZERO, money_sum, to_money
from ...common.validators import require_positive_amount
from ...core.constants import (
    ESI_RATE,
    ESI_SALARY_CEILING,
    HRA_RATE,
    MAX_PF_AMOUNT,
    OVERTIME_MULTIPLIER,
    PF_RATE,
    STANDARD_WORK_HOURS,
    TAX_SLABS,
)
from ...core.enums import AttendanceStatus, VariablePayStatus
from .base import (
    CalculationOptions,
    EmployeePayrollData,
    PayrollCalculationResult,
    PayrollCalculator,
    ValidationReport,
    compute_totals,
)

HALF = Decimal("0.5")
HOURS_CENT = Decimal("0.01")


def monthly_tax(gross: Decimal) -> Decimal:
    """Monthly share of the annual slab tax on ``gross * 12``."""
    annual = to_money(gross) * 12
    tax = ZERO
    lower = ZERO
    for upper, rate in TAX_SLABS:
        if annual <= lower:
            break
        top = annual if upper is None else min(annual, upper)
        tax += (top - lower) * rate
        if upper is None:
            break
        lower = upper
    return to_money(tax / 12)


class StandardPayrollCalculator(PayrollCalculator):
    """Standard monthly rule set: HRA, PF, ESI and slab tax on pro-rated basic."""

    def attendance_totals(
        self, records: Sequence[AttendanceRecord], month: int, year: int
    ) -> tuple[Decimal, Decimal, Decimal]:
        """(present days, leave days, overtime hours) for records inside the month."""
        start, end = month_bounds(month, year)
        present = ZERO
        leave = ZERO
        overtime = ZERO
        for r in records:
            if not start <= r.work_date <= end:
                continue
            if r.status == AttendanceStatus.PRESENT:
                present += 1
                extra = Decimal(str(r.worked_hours)) - STANDARD_WORK_HOURS
                if extra > 0:
                    overtime += extra
            elif r.status == AttendanceStatus.ABSENT:
                leave += 1
            elif r.status == AttendanceStatus.HALF_DAY:
                present += HALF
                leave += HALF
        return present, leave, overtime.quantize(HOURS_CENT)

    def prorated_basic(self, data: EmployeePayrollData, basic: Decimal, present_days: Decimal, working_days: int) -> Decimal:
        start, end = month_bounds(data.month, data.year)
        daily = basic / working_days
        if data.hire_date and start <= data.hire_date <= end:
            return to_money(daily * working_days_between(data.hire_date, end))
        if data.exit_date and start <= data.exit_date <= end:
            return to_money(daily * working_days_between(start, data.exit_date))
        return to_money(daily * present_days)

    def calculate(
        self, data: EmployeePayrollData, options: Optional[CalculationOptions] = None
    ) -> PayrollCalculationResult:
        options = options or CalculationOptions()
        full_basic = require_positive_amount(data.basic_salary, "Basic salary")
        working_days = working_days_in_month(data.month, data.year)

        present_days = Decimal(working_days)
        leave_days = ZERO
        overtime_hours = ZERO
        if options.include_attendance and data.attendance:
            present_days, leave_days, overtime_hours = self.attendance_totals(data.attendance, data.month, data.year)

        basic = self.prorated_basic(data, full_basic, present_days, working_days) if options.pro_rate else to_money(full_basic)

        hra = to_money(basic * HRA_RATE)
        variable_pay = ZERO
        if options.include_variable_pay:
            variable_pay = money_sum(e.amount for e in data.variable_pay if e.status == VariablePayStatus.APPROVED)
        overtime = ZERO
        if overtime_hours > 0:
            hourly = basic / (working_days * STANDARD_WORK_HOURS)
            overtime = to_money(overtime_hours * hourly * OVERTIME_MULTIPLIER)

        components = {
            "basic_salary": basic,
            "hra": hra,
            "variable_pay": variable_pay,
            "overtime": overtime,
            "bonus": to_money(data.bonus),
            "allowances": to_money(data.allowances),
            "pf": ZERO,
            "esi": ZERO,
            "tax": ZERO,
            "insurance": ZERO,
            "leave_deduction": ZERO,
            "other_deductions": to_money(data.other_deductions),
        }
        gross, _, _ = compute_totals(components)

        if options.include_statutory_deductions:
            components["pf"] = min(to_money(basic * PF_RATE), to_money(MAX_PF_AMOUNT))
            components["esi"] = ZERO if basic > ESI_SALARY_CEILING else to_money(basic * ESI_RATE)
            components["tax"] = monthly_tax(gross)
            components["insurance"] = to_money(data.insurance)
        if leave_days > 0:
            components["leave_deduction"] = to_money(basic / working_days * leave_days)

        total_earnings, total_deductions, net = compute_totals(components)
        return PayrollCalculationResult(
            total_earnings=total_earnings,
            total_deductions=total_deductions,
            net_salary=net,
            working_days=working_days,
            present_days=present_days,
            leave_days=leave_days,
            overtime_hours=overtime_hours,
            **components,
        )

    def validate(self, result: PayrollCalculationResult) -> ValidationReport:
        errors: list[str] = []
        warnings: list[str] = []

        if result.basic_salary < 0:
            errors.append("Basic salary cannot be negative")
        if result.total_earnings < 0:
            errors.append("Total earnings cannot be negative")
        if result.total_deductions < 0:
            errors.append("Total deductions cannot be negative")
        if result.net_salary < 0:
            errors.append("Net salary cannot be negative")
        if result.present_days > result.working_days:
            errors.append("Present days cannot exceed working days")
        if result.leave_days > result.working_days:
            errors.append("Leave days cannot exceed working days")

        if result.pf > MAX_PF_AMOUNT:
            warnings.append(f"PF contribution ({result.pf}) exceeds maximum limit ({MAX_PF_AMOUNT})")
        expected_hra = to_money(result.basic_salary * HRA_RATE)
        if abs(result.hra - expected_hra) > 1:
            warnings.append(f"HRA calculation may be incorrect. Expected: {expected_hra}, Actual: {result.hra}")

        return ValidationReport(errors=tuple(errors), warnings=tuple(warnings))
