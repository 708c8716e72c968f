from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..core.enums import (
    CorrectionStatus,
    CorrectionType,
    PayrollInputStatus,
    PayrollStatus,
    PayslipStatus,
    VariablePayStatus,
    VariablePayType,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    build_where,
    conditional_update,
    db_cursor,
    fetchall,
    fetchone,
    insert_row,
)
from .model import AuditLog, CorrectionRequest, Payroll, PayrollInput, Payslip, VariablePayEntry
from .repository import (
    AuditLogRepository,
    CorrectionRepository,
    PayrollInputRepository,
    PayrollRepository,
    PayslipRepository,
    VariablePayRepository,
)

_EMPLOYEE_NAME = "CONCAT(e.first_name, ' ', e.last_name) AS employee_name"

_INPUT_MONEY = (
    "basic_salary", "hra", "variable_pay", "overtime", "bonus", "allowances", "total_earnings",
    "pf", "esi", "tax", "insurance", "leave_deduction", "other_deductions", "total_deductions", "net_salary",
)


def _json_or_none(value):
    if isinstance(value, (bytes, str)):
        return json.loads(value) if value else None
    return value


def _row_to_payroll(r: dict) -> Payroll:
    return Payroll(
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        basic_salary=as_decimal(r["basic_salary"]),
        allowances=as_decimal(r["allowances"]),
        deductions=as_decimal(r["deductions"]),
        net_salary=as_decimal(r["net_salary"]),
        status=PayrollStatus(r["status"]),
        version=int(r["version"]),
        created_at=r.get("created_at"),
        paid_at=r.get("paid_at"),
        employee_name=r.get("employee_name"),
        department_name=r.get("department_name"),
    )


def _row_to_input(r: dict) -> PayrollInput:
    money = {k: as_decimal(r.get(k)) for k in _INPUT_MONEY}
    return PayrollInput(
        input_id=int(r["input_id"]),
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        working_days=int(r.get("working_days") or 0),
        present_days=as_decimal(r.get("present_days")),
        leave_days=as_decimal(r.get("leave_days")),
        status=PayrollInputStatus(r["status"]),
        version=int(r["version"]),
        notes=r.get("notes"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        processed_by=r.get("processed_by"),
        processed_at=r.get("processed_at"),
        employee_name=r.get("employee_name"),
        **money,
    )


def _row_to_entry(r: dict) -> VariablePayEntry:
    return VariablePayEntry(
        entry_id=int(r["entry_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        amount=as_decimal(r["amount"]),
        pay_type=VariablePayType(r["pay_type"]),
        description=r["description"],
        status=VariablePayStatus(r["status"]),
        submitted_by=int(r["submitted_by"]),
        version=int(r["version"]),
        created_at=r.get("created_at"),
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        rejection_reason=r.get("rejection_reason"),
        employee_name=r.get("employee_name"),
    )


def _row_to_correction(r: dict) -> CorrectionRequest:
    amount = r.get("requested_amount")
    return CorrectionRequest(
        correction_id=int(r["correction_id"]),
        employee_id=int(r["employee_id"]),
        payroll_id=int(r["payroll_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        correction_type=CorrectionType(r["correction_type"]),
        description=r["description"],
        status=CorrectionStatus(r["status"]),
        requested_by=int(r["requested_by"]),
        version=int(r["version"]),
        requested_amount=as_decimal(amount) if amount is not None else None,
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        review_comments=r.get("review_comments"),
        resolution=r.get("resolution"),
        created_at=r.get("created_at"),
        employee_name=r.get("employee_name"),
    )


def _row_to_payslip(r: dict) -> Payslip:
    return Payslip(
        payslip_id=int(r["payslip_id"]),
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        file_name=r["file_name"],
        status=PayslipStatus(r["status"]),
        generated_by=int(r["generated_by"]),
        version=int(r["version"]),
        snapshot=_json_or_none(r.get("snapshot")),
        generated_at=r.get("generated_at"),
        downloaded_at=r.get("downloaded_at"),
        employee_name=r.get("employee_name"),
    )


class MySQLPayrollRepository(PayrollRepository):
    _SELECT = f"""
        SELECT p.payroll_id, p.employee_id, p.month, p.year, p.basic_salary, p.allowances, p.deductions,
               p.net_salary, p.status, p.version, p.created_at, p.paid_at,
               {_EMPLOYEE_NAME}, d.name AS department_name
        FROM payrolls p
        JOIN employees e ON e.employee_id = p.employee_id
        LEFT JOIN departments d ON d.department_id = e.department_id
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, payroll_id: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{self._SELECT} WHERE p.payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _row_to_payroll(r) if r else None

    def find(self, *, employee_id: int, month: int, year: int) -> Optional[Payroll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{self._SELECT} WHERE p.employee_id=%s AND p.month=%s AND p.year=%s",
                (int(employee_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return _row_to_payroll(r) if r else None

    def list_payrolls(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
        limit: int = 200,
    ) -> Sequence[Payroll]:
        where, params = build_where(
            [
                ("p.employee_id=%s", employee_id),
                ("p.month=%s", month),
                ("p.year=%s", year),
                ("p.status=%s", status),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{self._SELECT} WHERE {where} ORDER BY p.year DESC, p.month DESC, p.payroll_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_payroll(r) for r in fetchall(cur)]

    def update(self, *, payroll_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="payrolls",
                id_column="payroll_id",
                row_id=payroll_id,
                expected_version=expected_version,
                values=values,
            )

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
        with db_cursor(self._conn_factory) as (conn, cur):
            if payroll_id is None:
                payroll_id = insert_row(cur, table="payrolls", values=payroll_values)
            elif not conditional_update(
                cur,
                table="payrolls",
                id_column="payroll_id",
                row_id=payroll_id,
                expected_version=int(payroll_version),
                values=payroll_values,
            ):
                return None

            if input_id is None:
                input_id = insert_row(cur, table="payroll_inputs", values={**input_values, "payroll_id": payroll_id})
            elif not conditional_update(
                cur,
                table="payroll_inputs",
                id_column="input_id",
                row_id=input_id,
                expected_version=int(input_version),
                values=input_values,
            ):
                # undo the payroll write made above in this transaction
                conn.rollback()
                return None
            return int(payroll_id), int(input_id)

    def count_by_status(self, *, month: Optional[int] = None, year: Optional[int] = None) -> Sequence[dict]:
        where, params = build_where([("month=%s", month), ("year=%s", year)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT status, COUNT(*) AS count FROM payrolls WHERE {where} GROUP BY status",
                tuple(params),
            )
            return [{"status": r["status"], "count": int(r["count"])} for r in fetchall(cur)]

    def net_by_department(self, *, month: int, year: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT d.name AS department, p.net_salary, p.status
                FROM payrolls p
                JOIN employees e ON e.employee_id = p.employee_id
                LEFT JOIN departments d ON d.department_id = e.department_id
                WHERE p.month=%s AND p.year=%s
                """,
                (int(month), int(year)),
            )
            return [
                {"department": r.get("department"), "net_salary": as_decimal(r["net_salary"]), "status": r["status"]}
                for r in fetchall(cur)
            ]


class MySQLPayrollInputRepository(PayrollInputRepository):
    _SELECT = f"""
        SELECT i.*, {_EMPLOYEE_NAME}
        FROM payroll_inputs i
        JOIN employees e ON e.employee_id = i.employee_id
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, input_id: int) -> Optional[PayrollInput]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{self._SELECT} WHERE i.input_id=%s", (int(input_id),))
            r = fetchone(cur)
            return _row_to_input(r) if r else None

    def find(self, *, employee_id: int, month: int, year: int) -> Optional[PayrollInput]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{self._SELECT} WHERE i.employee_id=%s AND i.month=%s AND i.year=%s",
                (int(employee_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return _row_to_input(r) if r else None

    def list_inputs(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollInputStatus] = None,
        limit: int = 200,
    ) -> Sequence[PayrollInput]:
        where, params = build_where(
            [
                ("i.employee_id=%s", employee_id),
                ("i.month=%s", month),
                ("i.year=%s", year),
                ("i.status=%s", status),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{self._SELECT} WHERE {where} ORDER BY i.year DESC, i.month DESC, i.input_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_input(r) for r in fetchall(cur)]

    def update(self, *, input_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="payroll_inputs",
                id_column="input_id",
                row_id=input_id,
                expected_version=expected_version,
                values=values,
            )

    def delete(self, *, input_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payroll_inputs WHERE input_id=%s", (int(input_id),))
            return cur.rowcount == 1


class MySQLVariablePayRepository(VariablePayRepository):
    _SELECT = f"""
        SELECT v.entry_id, v.employee_id, v.month, v.year, v.amount, v.pay_type, v.description, v.status,
               v.submitted_by, v.version, v.created_at, v.decided_by, v.decided_at, v.rejection_reason,
               {_EMPLOYEE_NAME}
        FROM variable_pay_entries v
        JOIN employees e ON e.employee_id = v.employee_id
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, entry_id: int) -> Optional[VariablePayEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{self._SELECT} WHERE v.entry_id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def list_entries(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[VariablePayStatus] = None,
        limit: int = 200,
    ) -> Sequence[VariablePayEntry]:
        where, params = build_where(
            [
                ("v.employee_id=%s", employee_id),
                ("v.month=%s", month),
                ("v.year=%s", year),
                ("v.status=%s", status),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{self._SELECT} WHERE {where} ORDER BY v.created_at DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO variable_pay_entries(employee_id, month, year, amount, pay_type, description, status, submitted_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    int(month),
                    int(year),
                    amount,
                    VariablePayType(pay_type).value,
                    description,
                    VariablePayStatus.PENDING.value,
                    int(submitted_by),
                ),
            )
            return int(cur.lastrowid)

    def update(self, *, entry_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="variable_pay_entries",
                id_column="entry_id",
                row_id=entry_id,
                expected_version=expected_version,
                values=values,
            )

    def delete(self, *, entry_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM variable_pay_entries WHERE entry_id=%s", (int(entry_id),))
            return cur.rowcount == 1

    def count_by_status(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS count FROM variable_pay_entries GROUP BY status")
            return [{"status": r["status"], "count": int(r["count"])} for r in fetchall(cur)]


class MySQLCorrectionRepository(CorrectionRepository):
    _SELECT = f"""
        SELECT c.correction_id, c.employee_id, c.payroll_id, c.month, c.year, c.correction_type, c.description,
               c.status, c.requested_by, c.version, c.requested_amount, c.reviewed_by, c.reviewed_at,
               c.review_comments, c.resolution, c.created_at, {_EMPLOYEE_NAME}
        FROM payroll_corrections c
        JOIN employees e ON e.employee_id = c.employee_id
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, correction_id: int) -> Optional[CorrectionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{self._SELECT} WHERE c.correction_id=%s", (int(correction_id),))
            r = fetchone(cur)
            return _row_to_correction(r) if r else None

    def list_corrections(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[CorrectionStatus] = None,
        limit: int = 200,
    ) -> Sequence[CorrectionRequest]:
        where, params = build_where([("c.employee_id=%s", employee_id), ("c.status=%s", status)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{self._SELECT} WHERE {where} ORDER BY c.created_at DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_correction(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_corrections(employee_id, payroll_id, month, year, correction_type, description,
                                                requested_amount, status, requested_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    int(payroll_id),
                    int(month),
                    int(year),
                    CorrectionType(correction_type).value,
                    description,
                    requested_amount,
                    CorrectionStatus.PENDING.value,
                    int(requested_by),
                ),
            )
            return int(cur.lastrowid)

    def update(self, *, correction_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="payroll_corrections",
                id_column="correction_id",
                row_id=correction_id,
                expected_version=expected_version,
                values=values,
            )

    def count_by_status(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS count FROM payroll_corrections GROUP BY status")
            return [{"status": r["status"], "count": int(r["count"])} for r in fetchall(cur)]


class MySQLPayslipRepository(PayslipRepository):
    _SELECT = f"""
        SELECT s.payslip_id, s.payroll_id, s.employee_id, s.month, s.year, s.file_name, s.status, s.generated_by,
               s.version, s.snapshot, s.generated_at, s.downloaded_at, {_EMPLOYEE_NAME}
        FROM payslips s
        JOIN employees e ON e.employee_id = s.employee_id
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, payslip_id: int) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{self._SELECT} WHERE s.payslip_id=%s", (int(payslip_id),))
            r = fetchone(cur)
            return _row_to_payslip(r) if r else None

    def find(self, *, employee_id: int, month: int, year: int) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{self._SELECT} WHERE s.employee_id=%s AND s.month=%s AND s.year=%s",
                (int(employee_id), int(month), int(year)),
            )
            r = fetchone(cur)
            return _row_to_payslip(r) if r else None

    def list_payslips(
        self,
        *,
        employee_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[Payslip]:
        where, params = build_where([("s.employee_id=%s", employee_id), ("s.month=%s", month), ("s.year=%s", year)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{self._SELECT} WHERE {where} ORDER BY s.year DESC, s.month DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_payslip(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payslips(payroll_id, employee_id, month, year, file_name, status, generated_by, snapshot)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(payroll_id),
                    int(employee_id),
                    int(month),
                    int(year),
                    file_name,
                    PayslipStatus.GENERATED.value,
                    int(generated_by),
                    json.dumps(snapshot, default=str),
                ),
            )
            return int(cur.lastrowid)

    def update(self, *, payslip_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="payslips",
                id_column="payslip_id",
                row_id=payslip_id,
                expected_version=expected_version,
                values=values,
            )


class MySQLAuditLogRepository(AuditLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, log: AuditLog) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payroll_audit_logs(payroll_id, employee_id, action, details, performed_by)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (log.payroll_id, log.employee_id, log.action, json.dumps(log.details, default=str), int(log.performed_by)),
            )
            return int(cur.lastrowid)

    def list_for_payroll(self, *, payroll_id: int) -> Sequence[AuditLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, payroll_id, employee_id, action, details, performed_by, performed_at
                FROM payroll_audit_logs
                WHERE payroll_id=%s
                ORDER BY performed_at, log_id
                """,
                (int(payroll_id),),
            )
            return [
                AuditLog(
                    log_id=int(r["log_id"]),
                    payroll_id=r.get("payroll_id"),
                    employee_id=r.get("employee_id"),
                    action=r["action"],
                    details=_json_or_none(r.get("details")) or {},
                    performed_by=int(r["performed_by"]),
                    performed_at=r.get("performed_at"),
                )
                for r in fetchall(cur)
            ]
