from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus, RegularizationStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    build_where,
    conditional_update,
    db_cursor,
    fetchall,
    fetchone,
    insert_row,
)
from .model import AttendanceRecord, RegularizationRequest
from .repository import AttendanceRepository, RegularizationRepository

_ATTENDANCE_SELECT = """
    SELECT a.attendance_id, a.employee_id, a.work_date, a.status, a.check_in, a.check_out,
           a.check_in_location, a.check_out_location, a.notes,
           a.is_regularized, a.regularized_by, a.regularized_at, a.version,
           CONCAT(e.first_name, ' ', e.last_name) AS employee_name
    FROM attendance_records a
    JOIN employees e ON e.employee_id = a.employee_id
"""

_REGULARIZATION_SELECT = """
    SELECT r.request_id, r.employee_id, r.work_date, r.reason, r.status, r.version,
           r.requested_at, r.reviewed_by, r.reviewed_at, r.review_comments,
           CONCAT(e.first_name, ' ', e.last_name) AS employee_name
    FROM attendance_regularization_requests r
    JOIN employees e ON e.employee_id = r.employee_id
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        check_in_location=r.get("check_in_location"),
        check_out_location=r.get("check_out_location"),
        notes=r.get("notes"),
        is_regularized=bool(r.get("is_regularized")),
        regularized_by=r.get("regularized_by"),
        regularized_at=r.get("regularized_at"),
        version=int(r.get("version") or 1),
        employee_name=r.get("employee_name"),
    )


def _row_to_regularization(r: dict) -> RegularizationRequest:
    return RegularizationRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        reason=r["reason"],
        status=RegularizationStatus(r["status"]),
        version=int(r["version"]),
        requested_at=r.get("requested_at"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        review_comments=r.get("review_comments"),
        employee_name=r.get("employee_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employee_between(self, employee_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        return self.list_records(employee_id=employee_id, start=start, end=end, limit=400)

    def get(self, *, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_ATTENDANCE_SELECT} WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def find(self, *, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_ATTENDANCE_SELECT} WHERE a.employee_id=%s AND a.work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_records(
        self,
        *,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceRecord]:
        where, params = build_where(
            [
                ("a.employee_id=%s", employee_id),
                ("a.work_date>=%s", start),
                ("a.work_date<=%s", end),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_ATTENDANCE_SELECT} WHERE {where} ORDER BY a.work_date DESC, a.attendance_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def create(self, *, employee_id: int, work_date: date, status: AttendanceStatus, values: dict[str, Any]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_row(
                cur,
                table="attendance_records",
                values={**values, "employee_id": int(employee_id), "work_date": work_date, "status": status},
            )

    def update(self, *, attendance_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="attendance_records",
                id_column="attendance_id",
                row_id=attendance_id,
                expected_version=expected_version,
                values=values,
            )

    def delete(self, *, attendance_id: int, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE attendance_id=%s AND version=%s",
                (int(attendance_id), int(expected_version)),
            )
            return cur.rowcount == 1


class MySQLRegularizationRepository(RegularizationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, employee_id: int, work_date: date, reason: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_row(
                cur,
                table="attendance_regularization_requests",
                values={
                    "employee_id": int(employee_id),
                    "work_date": work_date,
                    "reason": reason,
                    "status": RegularizationStatus.PENDING,
                },
            )

    def get(self, *, request_id: int) -> Optional[RegularizationRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_REGULARIZATION_SELECT} WHERE r.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_regularization(r) if r else None

    def find(self, *, employee_id: int, work_date: date) -> Optional[RegularizationRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_REGULARIZATION_SELECT} WHERE r.employee_id=%s AND r.work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_regularization(r) if r else None

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[RegularizationStatus] = None,
        limit: int = 200,
    ) -> Sequence[RegularizationRequest]:
        where, params = build_where([("r.employee_id=%s", employee_id), ("r.status=%s", status)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_REGULARIZATION_SELECT} WHERE {where} ORDER BY r.requested_at DESC, r.request_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_regularization(r) for r in fetchall(cur)]

    def review(
        self,
        *,
        request_id: int,
        expected_version: int,
        values: dict[str, Any],
        attendance_id: Optional[int] = None,
        attendance_version: Optional[int] = None,
        attendance_values: Optional[dict[str, Any]] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (conn, cur):
            if not conditional_update(
                cur,
                table="attendance_regularization_requests",
                id_column="request_id",
                row_id=request_id,
                expected_version=expected_version,
                values=values,
            ):
                return False
            if attendance_id is not None and not conditional_update(
                cur,
                table="attendance_records",
                id_column="attendance_id",
                row_id=attendance_id,
                expected_version=attendance_version,
                values=attendance_values or {},
            ):
                # undo the request decision made above in this transaction
                conn.rollback()
                return False
            return True

    def count_by_status(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS count FROM attendance_regularization_requests GROUP BY status")
            return [{"status": r["status"], "count": int(r["count"])} for r in fetchall(cur)]
