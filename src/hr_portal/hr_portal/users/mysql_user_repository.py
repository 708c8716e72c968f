from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    build_where,
    db_cursor,
    fetchall,
    fetchone,
    insert_row,
    update_row,
)
from .model import Department, Employee, User
from .repository import DepartmentRepository, EmployeeRepository, UserRepository

_USER_COLUMNS = "user_id, name, email, password_hash, role, is_active"

_EMPLOYEE_SELECT = """
    SELECT e.employee_id, e.user_id, e.employee_code, e.first_name, e.last_name, e.email,
           e.department_id, e.position, e.salary, e.hire_date, e.exit_date, e.is_active,
           d.name AS department_name
    FROM employees e
    LEFT JOIN departments d ON d.department_id = e.department_id
"""


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
    )


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        user_id=row.get("user_id"),
        employee_code=row["employee_code"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=row["email"],
        department_id=row.get("department_id"),
        position=row.get("position"),
        salary=as_decimal(row["salary"]),
        hire_date=row["hire_date"],
        exit_date=row.get("exit_date"),
        is_active=bool(row.get("is_active", True)),
        department_name=row.get("department_name"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET is_active=%s WHERE user_id=%s", (1 if is_active else 0, int(user_id)))
            return cur.rowcount > 0


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, param) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_EMPLOYEE_SELECT} WHERE {where}", (param,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._get_one("e.employee_id=%s", int(employee_id))

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        return self._get_one("e.user_id=%s", int(user_id))

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("e.email=%s", email)

    def list_employees(
        self,
        *,
        active_only: bool = True,
        department_id: Optional[int] = None,
        employee_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Employee]:
        where, params = build_where(
            [
                ("e.is_active=%s", 1 if active_only else None),
                ("e.department_id=%s", department_id),
            ]
        )
        if employee_ids:
            placeholders = ",".join(["%s"] * len(employee_ids))
            where += f" AND e.employee_id IN ({placeholders})"
            params.extend(int(i) for i in employee_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_EMPLOYEE_SELECT} WHERE {where} ORDER BY e.last_name, e.first_name", tuple(params))
            return [_row_to_employee(r) for r in fetchall(cur)]

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        return self._get_one("e.employee_code=%s", employee_code)

    def create_with_login(self, *, user_values: dict[str, Any], employee_values: dict[str, Any]) -> tuple[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            user_id = insert_row(cur, table="users", values={**user_values, "is_active": 1})
            employee_id = insert_row(
                cur,
                table="employees",
                values={**employee_values, "user_id": user_id, "is_active": 1},
            )
            return user_id, employee_id

    def update_with_login(
        self,
        employee_id: int,
        *,
        user_id: Optional[int],
        employee_values: dict[str, Any],
        user_values: dict[str, Any],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            if employee_values:
                update_row(cur, table="employees", id_column="employee_id", row_id=employee_id, values=employee_values)
            if user_values and user_id is not None:
                update_row(cur, table="users", id_column="user_id", row_id=user_id, values=user_values)

    def set_active(self, employee_id: int, *, is_active: bool, exit_date: Optional[date] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET is_active=%s, exit_date=%s WHERE employee_id=%s",
                (1 if is_active else 0, exit_date, int(employee_id)),
            )
            return cur.rowcount > 0

    def headcount_by_department(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(d.name, '-') AS department, COUNT(*) AS count
                FROM employees e
                LEFT JOIN departments d ON d.department_id = e.department_id
                WHERE e.is_active = 1
                GROUP BY d.name
                ORDER BY count DESC
                """
            )
            return [{"department": r["department"], "count": int(r["count"])} for r in fetchall(cur)]


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT department_id, name, description FROM departments ORDER BY name")
            return [
                Department(department_id=int(r["department_id"]), name=r["name"], description=r.get("description"))
                for r in fetchall(cur)
            ]

    def get_by_id(self, department_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT department_id, name, description FROM departments WHERE department_id=%s",
                (int(department_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Department(department_id=int(r["department_id"]), name=r["name"], description=r.get("description"))
