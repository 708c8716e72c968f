from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Sequence

from ...common.aggregation import average
from ...common.money import ZERO, money_sum
from ...attendance.model import AttendanceRecord


@dataclass(frozen=True)
class CalculationOptions:
    include_variable_pay: bool = True
    include_attendance: bool = True
    include_statutory_deductions: bool = True
    pro_rate: bool = True


@dataclass(frozen=True)
class EmployeePayrollData:
    """Everything the calculator needs for one employee and one month."""

    employee_id: int
    month: int
    year: int
    basic_salary: Decimal
    attendance: Sequence[AttendanceRecord] = ()
    variable_pay: Sequence[Any] = ()
    hire_date: Optional[date] = None
    exit_date: Optional[date] = None
    bonus: Decimal = ZERO
    allowances: Decimal = ZERO
    insurance: Decimal = ZERO
    other_deductions: Decimal = ZERO


@dataclass(frozen=True)
class PayrollCalculationResult:
    basic_salary: Decimal
    hra: Decimal
    variable_pay: Decimal
    overtime: Decimal
    bonus: Decimal
    allowances: Decimal
    total_earnings: Decimal
    pf: Decimal
    esi: Decimal
    tax: Decimal
    insurance: Decimal
    leave_deduction: Decimal
    other_deductions: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    working_days: int
    present_days: Decimal
    leave_days: Decimal
    overtime_hours: Decimal = ZERO


@dataclass(frozen=True)
class ValidationReport:
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class PayrollSummary:
    month: int
    year: int
    total_employees: int
    total_basic_salary: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    total_net_salary: Decimal
    total_pf: Decimal
    total_esi: Decimal
    total_tax: Decimal
    average_salary: Decimal = field(default=ZERO)


EARNING_FIELDS = ("basic_salary", "hra", "variable_pay", "overtime", "bonus", "allowances")
DEDUCTION_FIELDS = ("pf", "esi", "tax", "insurance", "leave_deduction", "other_deductions")


def compute_totals(components: dict[str, Any]) -> tuple[Decimal, Decimal, Decimal]:
    """(total earnings, total deductions, net) from quantized components.

    Every place that stores a payroll row goes through here so that
    ``net == earnings - deductions`` holds to the cent.
    """
    earnings = money_sum(components.get(k) for k in EARNING_FIELDS)
    deductions = money_sum(components.get(k) for k in DEDUCTION_FIELDS)
    return earnings, deductions, earnings - deductions


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(
        self, data: EmployeePayrollData, options: Optional[CalculationOptions] = None
    ) -> PayrollCalculationResult:
        raise NotImplementedError

    @abstractmethod
    def validate(self, result: PayrollCalculationResult) -> ValidationReport:
        raise NotImplementedError

    def summarize(self, results: Sequence[PayrollCalculationResult], *, month: int, year: int) -> PayrollSummary:
        total_net = money_sum(r.net_salary for r in results)
        return PayrollSummary(
            month=month,
            year=year,
            total_employees=len(results),
            total_basic_salary=money_sum(r.basic_salary for r in results),
            total_earnings=money_sum(r.total_earnings for r in results),
            total_deductions=money_sum(r.total_deductions for r in results),
            total_net_salary=total_net,
            total_pf=money_sum(r.pf for r in results),
            total_esi=money_sum(r.esi for r in results),
            total_tax=money_sum(r.tax for r in results),
            average_salary=average(total_net, len(results)),
        )
