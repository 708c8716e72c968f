from datetime import datetime

from src.hr_portal.hr_portal.attendance.mysql_attendance_repository import MySQLRegularizationRepository
from src.hr_portal.hr_portal.core.enums import RegularizationStatus


class ScriptedCursor:
    """Answers each UPDATE with the next rowcount from the connection's script."""

    def __init__(self, conn):
        self._conn = conn
        self.rowcount = 0

    def execute(self, sql, params=()):
        self._conn.statements.append((" ".join(sql.split()), params))
        self.rowcount = self._conn.rowcounts.pop(0)

    def close(self):
        pass


class ScriptedConnection:
    def __init__(self, *rowcounts):
        self.rowcounts = list(rowcounts)
        self.statements = []
        self.commits = 0
        self.rollbacks = 0

    def connect(self):
        return self

    def cursor(self, dictionary=True):
        return ScriptedCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        pass


def _approve(repo):
    return repo.review(
        request_id=7,
        expected_version=1,
        values={"status": RegularizationStatus.APPROVED, "reviewed_by": 2},
        attendance_id=11,
        attendance_version=3,
        attendance_values={"is_regularized": True, "regularized_by": 2, "regularized_at": datetime(2024, 3, 15)},
    )


def test_approval_updates_request_and_attendance_together():
    conn = ScriptedConnection(1, 1)
    assert _approve(MySQLRegularizationRepository(conn)) is True

    request_sql, request_params = conn.statements[0]
    attendance_sql, attendance_params = conn.statements[1]
    assert request_sql.startswith("UPDATE attendance_regularization_requests SET status=%s")
    assert request_params[0] == "APPROVED"
    assert request_params[-2:] == (7, 1)
    assert attendance_sql.startswith("UPDATE attendance_records SET is_regularized=%s")
    assert attendance_params[-2:] == (11, 3)
    assert (conn.commits, conn.rollbacks) == (1, 0)


def test_stale_attendance_row_rolls_back_the_decision():
    conn = ScriptedConnection(1, 0)
    assert _approve(MySQLRegularizationRepository(conn)) is False
    assert conn.rollbacks == 1


def test_stale_request_skips_the_attendance_write():
    conn = ScriptedConnection(0)
    assert _approve(MySQLRegularizationRepository(conn)) is False
    assert len(conn.statements) == 1
