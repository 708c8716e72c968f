from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import CorrectionStatus, PayrollInputStatus, PayrollStatus, VariablePayStatus
from .model import AuditLog, CorrectionRequest, Payroll, PayrollInput, Payslip, VariablePayEntry


class PayrollRepository(Protocol):
    def get(self, *, payroll_id: int) -> Optional[Payroll]:
        raise NotImplementedError

    def find(self, *, employee_id: int, month: int, year: int) -> Optional[Payroll]:
        raise NotImplementedError

    def list_payrolls(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        limit: int = 200,
    ) -> Sequence[Payroll]:
        raise NotImplementedError

    def update(self, *, payroll_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def save_with_input(
        self,
        *,
        payroll_values: dict[str, Any],
        input_values: dict[str, Any],
        payroll_id: Optional[int] = None,
        payroll_version: Optional[int] = None,
        input_id: Optional[int] = None,
        input_version: Optional[int] = None,
    ) -> Optional[tuple[int, int]]:
        """Write a payroll row and its input row in one transaction.

        A row without an id is inserted (the input row gets the new ``payroll_id``),
        a row with an id is a version compare-and-set. Returns ``(payroll_id, input_id)``,
        or None with nothing written when either compare-and-set loses.
        """
        raise NotImplementedError

    def count_by_status(self, *, month: Optional[int] = None, year: Optional[int] = None) -> Sequence[dict]:
        raise NotImplementedError

    def net_by_department(self, *, month: int, year: int) -> Sequence[dict]:
        """Rows of ``{"department": name, "net_salary": amount}``, one per payroll record."""

        raise NotImplementedError


class PayrollInputRepository(Protocol):
    def get(self, *, input_id: int) -> Optional[PayrollInput]:
        raise NotImplementedError

    def find(self, *, employee_id: int, month: int, year: int) -> Optional[PayrollInput]:
        raise NotImplementedError

    def list_inputs(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollInputStatus] = None,
        limit: int = 200,
    ) -> Sequence[PayrollInput]:
        raise NotImplementedError

    def update(self, *, input_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, *, input_id: int) -> bool:
        raise NotImplementedError


class VariablePayRepository(Protocol):
    def get(self, *, entry_id: int) -> Optional[VariablePayEntry]:
        raise NotImplementedError

    def list_entries(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[VariablePayStatus] = None,
        limit: int = 200,
    ) -> Sequence[VariablePayEntry]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        month: int,
        year: int,
        amount: Decimal,
        pay_type,
        description: str,
        submitted_by: int,
    ) -> int:
        raise NotImplementedError

    def update(self, *, entry_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete(self, *, entry_id: int) -> bool:
        raise NotImplementedError

    def count_by_status(self) -> Sequence[dict]:
        raise NotImplementedError


class CorrectionRepository(Protocol):
    def get(self, *, correction_id: int) -> Optional[CorrectionRequest]:
        raise NotImplementedError

    def list_corrections(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[CorrectionStatus] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        payroll_id: int,
        month: int,
        year: int,
        correction_type,
        description: str,
        requested_amount: Optional[Decimal],
        requested_by: int,
    ) -> int:
        raise NotImplementedError

    def update(self, *, correction_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError

    def count_by_status(self) -> Sequence[dict]:
        raise NotImplementedError


class PayslipRepository(Protocol):
    def get(self, *, payslip_id: int) -> Optional[Payslip]:
        raise NotImplementedError

    def find(self, *, employee_id: int, month: int, year: int) -> Optional[Payslip]:
        raise NotImplementedError

    def list_payslips(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[Payslip]:
        raise NotImplementedError

    def create(
        self,
        *,
        payroll_id: int,
        employee_id: int,
        month: int,
        year: int,
        file_name: str,
        generated_by: int,
        snapshot: dict[str, Any],
    ) -> int:
        raise NotImplementedError

    def update(self, *, payslip_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        raise NotImplementedError


class AuditLogRepository(Protocol):
    def add(self, log: AuditLog) -> int:
        raise NotImplementedError

    def list_for_payroll(self, *, payroll_id: int) -> Sequence[AuditLog]:
        raise NotImplementedError
