from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import RequestCategory, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, conditional_update, db_cursor, fetchall, fetchone
from .model import EmployeeRequest, RequestComment
from .repository import RequestRepository

_SELECT = """
    SELECT r.request_id, r.employee_id, r.category, r.title, r.description, r.status,
           r.assigned_to, r.created_at, r.updated_at, r.resolved_at, r.closed_at, r.version,
           CONCAT(e.first_name, ' ', e.last_name) AS employee_name,
           u.name AS assignee_name,
           (SELECT COUNT(*) FROM request_comments c WHERE c.request_id = r.request_id) AS comment_count
    FROM employee_requests r
    JOIN employees e ON e.employee_id = r.employee_id
    LEFT JOIN users u ON u.user_id = r.assigned_to
"""


def _row_to_request(r: dict) -> EmployeeRequest:
    return EmployeeRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        category=RequestCategory(r["category"]),
        title=r["title"],
        description=r["description"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        version=int(r["version"]),
        assigned_to=r.get("assigned_to"),
        updated_at=r.get("updated_at"),
        resolved_at=r.get("resolved_at"),
        closed_at=r.get("closed_at"),
        employee_name=r.get("employee_name"),
        assignee_name=r.get("assignee_name"),
        comment_count=int(r.get("comment_count") or 0),
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, employee_id: int, category: RequestCategory, title: str, description: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employee_requests(employee_id, category, title, description, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(employee_id), category.value, title, description, RequestStatus.OPEN.value),
            )
            return int(cur.lastrowid)

    def get(self, *, request_id: int) -> Optional[EmployeeRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE r.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list_requests(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        assigned_to: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[EmployeeRequest]:
        where, params = build_where(
            [
                ("r.employee_id=%s", employee_id),
                ("r.status=%s", status),
                ("r.assigned_to=%s", assigned_to),
            ]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {where} ORDER BY r.created_at DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def update(self, *, request_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="employee_requests",
                id_column="request_id",
                row_id=request_id,
                expected_version=expected_version,
                values=values,
            )

    def add_comment(self, *, request_id: int, user_id: int, comment: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO request_comments(request_id, user_id, comment) VALUES(%s,%s,%s)",
                (int(request_id), int(user_id), comment),
            )
            return int(cur.lastrowid)

    def list_comments(self, *, request_id: int) -> Sequence[RequestComment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.comment_id, c.request_id, c.user_id, c.comment, c.created_at,
                       u.name AS author_name, u.role AS author_role
                FROM request_comments c
                JOIN users u ON u.user_id = c.user_id
                WHERE c.request_id=%s
                ORDER BY c.created_at ASC, c.comment_id ASC
                """,
                (int(request_id),),
            )
            return [
                RequestComment(
                    comment_id=int(r["comment_id"]),
                    request_id=int(r["request_id"]),
                    user_id=int(r["user_id"]),
                    comment=r["comment"],
                    created_at=r["created_at"],
                    author_name=r.get("author_name"),
                    author_role=r.get("author_role"),
                )
                for r in fetchall(cur)
            ]

    def count_by_status(self, *, employee_id: Optional[int] = None) -> Sequence[dict]:
        where, params = build_where([("employee_id=%s", employee_id)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT status, COUNT(*) AS count FROM employee_requests WHERE {where} GROUP BY status",
                tuple(params),
            )
            return [{"status": r["status"], "count": int(r["count"])} for r in fetchall(cur)]
