from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..core.constants import MAX_PAYROLL_YEAR, MIN_PAYROLL_YEAR
from ..core.enums import (
    CorrectionStatus,
    CorrectionType,
    PayrollInputStatus,
    PayrollStatus,
    VariablePayType,
)
from .calculator.base import CalculationOptions


class PeriodBody(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=MIN_PAYROLL_YEAR, le=MAX_PAYROLL_YEAR)


class OptionsBody(BaseModel):
    include_variable_pay: bool = True
    include_attendance: bool = True
    include_statutory_deductions: bool = True
    pro_rate: bool = True

    def to_options(self) -> CalculationOptions:
        return CalculationOptions(**self.model_dump())


class CalculateBody(PeriodBody):
    employee_id: int = Field(gt=0)
    options: OptionsBody = Field(default_factory=OptionsBody)


class ProcessBody(PeriodBody):
    employee_ids: Optional[list[int]] = None
    options: OptionsBody = Field(default_factory=OptionsBody)


class CreatePayrollBody(PeriodBody):
    employee_id: int = Field(gt=0)
    basic_salary: Optional[Decimal] = Field(default=None, gt=0)
    bonus: Decimal = Field(default=Decimal("0"), ge=0)
    allowances: Decimal = Field(default=Decimal("0"), ge=0)
    other_deductions: Decimal = Field(default=Decimal("0"), ge=0)
    options: OptionsBody = Field(default_factory=OptionsBody)


class PayrollStatusBody(BaseModel):
    status: PayrollStatus
    version: Optional[int] = None


class UpdateInputBody(BaseModel):
    basic_salary: Optional[Decimal] = Field(default=None, gt=0)
    hra: Optional[Decimal] = Field(default=None, ge=0)
    variable_pay: Optional[Decimal] = Field(default=None, ge=0)
    overtime: Optional[Decimal] = Field(default=None, ge=0)
    bonus: Optional[Decimal] = Field(default=None, ge=0)
    allowances: Optional[Decimal] = Field(default=None, ge=0)
    pf: Optional[Decimal] = Field(default=None, ge=0)
    esi: Optional[Decimal] = Field(default=None, ge=0)
    tax: Optional[Decimal] = Field(default=None, ge=0)
    insurance: Optional[Decimal] = Field(default=None, ge=0)
    leave_deduction: Optional[Decimal] = Field(default=None, ge=0)
    other_deductions: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None
    version: Optional[int] = None

    def component_changes(self) -> dict[str, Decimal]:
        return self.model_dump(exclude={"notes", "version"}, exclude_none=True)


class InputStatusBody(BaseModel):
    status: PayrollInputStatus
    version: Optional[int] = None


class CreateVariablePayBody(PeriodBody):
    employee_id: int = Field(gt=0)
    amount: Decimal = Field(gt=0)
    pay_type: VariablePayType
    description: str = Field(min_length=1)


class RejectVariablePayBody(BaseModel):
    rejection_reason: Optional[str] = None
    version: Optional[int] = None


class ApproveVariablePayBody(BaseModel):
    version: Optional[int] = None


class CreateCorrectionBody(BaseModel):
    payroll_id: int = Field(gt=0)
    correction_type: CorrectionType
    description: str = Field(min_length=1)
    requested_amount: Optional[Decimal] = Field(default=None, gt=0)


class ReviewCorrectionBody(BaseModel):
    status: CorrectionStatus
    review_comments: Optional[str] = None
    resolution: Optional[str] = None
    version: Optional[int] = None


class GeneratePayslipBody(BaseModel):
    payroll_id: int = Field(gt=0)
