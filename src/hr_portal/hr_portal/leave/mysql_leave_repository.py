from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, conditional_update, db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_SELECT = """
    SELECT l.leave_id, l.employee_id, l.leave_type, l.start_date, l.end_date, l.reason, l.status,
           l.version, l.created_at, l.approved_by, l.approved_at, l.comments,
           CONCAT(e.first_name, ' ', e.last_name) AS employee_name
    FROM leave_requests l
    JOIN employees e ON e.employee_id = l.employee_id
"""


def _row_to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        version=int(r["version"]),
        created_at=r.get("created_at"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        comments=r.get("comments"),
        employee_name=r.get("employee_name"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(employee_id, leave_type, start_date, end_date, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(employee_id), leave_type.value, start_date, end_date, reason, LeaveStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get(self, *, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE l.leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        where, params = build_where([("l.employee_id=%s", employee_id), ("l.status=%s", status)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY l.created_at DESC, l.leave_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def update(self, *, leave_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="leave_requests",
                id_column="leave_id",
                row_id=leave_id,
                expected_version=expected_version,
                values=values,
            )

    def delete(self, *, leave_id: int, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM leave_requests WHERE leave_id=%s AND version=%s",
                (int(leave_id), int(expected_version)),
            )
            return cur.rowcount == 1

    def count_by_status(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS count FROM leave_requests GROUP BY status")
            return [{"status": r["status"], "count": int(r["count"])} for r in fetchall(cur)]
