from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from ..common.money import ZERO
from ..core.enums import (
    CorrectionStatus,
    CorrectionType,
    PayrollInputStatus,
    PayrollStatus,
    PayslipStatus,
    VariablePayStatus,
    VariablePayType,
)


@dataclass(frozen=True)
class Payroll:
    """Monthly payroll record of one employee (one row per employee/month/year)."""

    payroll_id: int
    employee_id: int
    month: int
    year: int
    basic_salary: Decimal
    allowances: Decimal
    deductions: Decimal
    net_salary: Decimal
    status: PayrollStatus
    version: int = 1
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    employee_name: Optional[str] = None
    department_name: Optional[str] = None


@dataclass(frozen=True)
class PayrollInput:
    """Component breakdown behind a payroll record."""

    input_id: int
    payroll_id: int
    employee_id: int
    month: int
    year: int
    basic_salary: Decimal
    hra: Decimal = ZERO
    variable_pay: Decimal = ZERO
    overtime: Decimal = ZERO
    bonus: Decimal = ZERO
    allowances: Decimal = ZERO
    total_earnings: Decimal = ZERO
    pf: Decimal = ZERO
    esi: Decimal = ZERO
    tax: Decimal = ZERO
    insurance: Decimal = ZERO
    leave_deduction: Decimal = ZERO
    other_deductions: Decimal = ZERO
    total_deductions: Decimal = ZERO
    net_salary: Decimal = ZERO
    working_days: int = 0
    present_days: Decimal = ZERO
    leave_days: Decimal = ZERO
    status: PayrollInputStatus = PayrollInputStatus.DRAFT
    version: int = 1
    notes: Optional[str] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    processed_by: Optional[int] = None
    processed_at: Optional[datetime] = None
    employee_name: Optional[str] = None


@dataclass(frozen=True)
class VariablePayEntry:
    entry_id: int
    employee_id: int
    month: int
    year: int
    amount: Decimal
    pay_type: VariablePayType
    description: str
    status: VariablePayStatus
    submitted_by: int
    version: int = 1
    created_at: Optional[datetime] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    employee_name: Optional[str] = None


@dataclass(frozen=True)
class CorrectionRequest:
    correction_id: int
    employee_id: int
    payroll_id: int
    month: int
    year: int
    correction_type: CorrectionType
    description: str
    status: CorrectionStatus
    requested_by: int
    version: int = 1
    requested_amount: Optional[Decimal] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    review_comments: Optional[str] = None
    resolution: Optional[str] = None
    created_at: Optional[datetime] = None
    employee_name: Optional[str] = None


@dataclass(frozen=True)
class Payslip:
    payslip_id: int
    payroll_id: int
    employee_id: int
    month: int
    year: int
    file_name: str
    status: PayslipStatus
    generated_by: int
    version: int = 1
    snapshot: Optional[dict[str, Any]] = None
    generated_at: Optional[datetime] = None
    downloaded_at: Optional[datetime] = None
    employee_name: Optional[str] = None


@dataclass(frozen=True)
class AuditLog:
    action: str
    performed_by: int
    details: dict[str, Any]
    payroll_id: Optional[int] = None
    employee_id: Optional[int] = None
    performed_at: Optional[datetime] = None
    log_id: Optional[int] = None
