from datetime import date
from decimal import Decimal

import pytest

from src.hr_portal.hr_portal.core.enums import Role
from src.hr_portal.hr_portal.users.mysql_user_repository import MySQLEmployeeRepository


class RecordingCursor:
    def __init__(self, conn):
        self._conn = conn
        self.lastrowid = None
        self.rowcount = 1

    def execute(self, sql, params=()):
        if self._conn.fail_on and self._conn.fail_on in sql:
            raise RuntimeError("insert failed")
        self._conn.statements.append((" ".join(sql.split()), params))
        self.lastrowid = len(self._conn.statements) + 40

    def close(self):
        pass


class RecordingConnection:
    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.statements = []
        self.commits = 0
        self.rollbacks = 0
        self.connects = 0

    def connect(self):
        self.connects += 1
        return self

    def cursor(self, dictionary=True):
        return RecordingCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        pass


def _create(repo):
    return repo.create_with_login(
        user_values={"name": "Nina New", "email": "nina@hrportal.local", "password_hash": "x", "role": Role.EMPLOYEE},
        employee_values={
            "employee_code": "EMP010",
            "first_name": "Nina",
            "last_name": "New",
            "email": "nina@hrportal.local",
            "department_id": 1,
            "position": None,
            "salary": Decimal("25000"),
            "hire_date": date(2024, 3, 18),
        },
    )


def test_user_and_employee_rows_share_one_transaction():
    conn = RecordingConnection()
    user_id, employee_id = _create(MySQLEmployeeRepository(conn))

    assert conn.connects == 1
    assert conn.commits == 1
    users_sql, users_params = conn.statements[0]
    employees_sql, employees_params = conn.statements[1]
    assert users_sql.startswith("INSERT INTO users(")
    assert "EMPLOYEE" in users_params
    assert employees_sql.startswith("INSERT INTO employees(")
    assert user_id in employees_params
    assert employee_id != user_id


def test_failed_employee_insert_rolls_back_the_login():
    conn = RecordingConnection(fail_on="INSERT INTO employees")
    with pytest.raises(RuntimeError):
        _create(MySQLEmployeeRepository(conn))

    assert conn.commits == 0
    assert conn.rollbacks == 1


def test_update_touches_login_only_when_user_values_given():
    conn = RecordingConnection()
    repo = MySQLEmployeeRepository(conn)
    repo.update_with_login(3, user_id=3, employee_values={"position": "Lead"}, user_values={})
    repo.update_with_login(3, user_id=3, employee_values={"first_name": "Evander"}, user_values={"name": "Evander E"})

    tables = [sql.split()[1] for sql, _ in conn.statements]
    assert tables == ["employees", "employees", "users"]
    assert conn.statements[2][1] == ("Evander E", 3)
    assert conn.commits == 2
