from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from ..core.enums import OnboardingStatus, OnboardingStepStatus, OnboardingStepType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, conditional_update, db_cursor, fetchall, fetchone
from .model import OnboardingStep, OnboardingSubmission
from .repository import OnboardingRepository

_SUBMISSION_SELECT = """
    SELECT s.submission_id, s.employee_id, s.status, s.created_by, s.created_at, s.completed_at, s.version,
           CONCAT(e.first_name, ' ', e.last_name) AS employee_name,
           d.name AS department_name,
           (SELECT COUNT(*) FROM onboarding_steps t WHERE t.submission_id = s.submission_id) AS total_steps,
           (SELECT COUNT(*) FROM onboarding_steps t
             WHERE t.submission_id = s.submission_id AND t.status = 'APPROVED') AS approved_steps
    FROM onboarding_submissions s
    JOIN employees e ON e.employee_id = s.employee_id
    LEFT JOIN departments d ON d.department_id = e.department_id
"""

_STEP_COLUMNS = """
    step_id, submission_id, step_type, status, step_data, submitted_at, reviewed_at,
    reviewed_by, review_comments, rejection_reason, version
"""


def _row_to_submission(r: dict) -> OnboardingSubmission:
    return OnboardingSubmission(
        submission_id=int(r["submission_id"]),
        employee_id=int(r["employee_id"]),
        status=OnboardingStatus(r["status"]),
        created_by=int(r["created_by"]),
        created_at=r["created_at"],
        version=int(r["version"]),
        completed_at=r.get("completed_at"),
        employee_name=r.get("employee_name"),
        department_name=r.get("department_name"),
        total_steps=int(r.get("total_steps") or 0),
        approved_steps=int(r.get("approved_steps") or 0),
    )


def _row_to_step(r: dict) -> OnboardingStep:
    data = r.get("step_data")
    if isinstance(data, (bytes, str)):
        data = json.loads(data) if data else None
    return OnboardingStep(
        step_id=int(r["step_id"]),
        submission_id=int(r["submission_id"]),
        step_type=OnboardingStepType(r["step_type"]),
        status=OnboardingStepStatus(r["status"]),
        version=int(r["version"]),
        step_data=data,
        submitted_at=r.get("submitted_at"),
        reviewed_at=r.get("reviewed_at"),
        reviewed_by=r.get("reviewed_by"),
        review_comments=r.get("review_comments"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLOnboardingRepository(OnboardingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_submission(
        self, *, employee_id: int, created_by: int, step_types: Sequence[OnboardingStepType]
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO onboarding_submissions(employee_id, status, created_by) VALUES(%s,%s,%s)",
                (int(employee_id), OnboardingStatus.CREATED.value, int(created_by)),
            )
            submission_id = int(cur.lastrowid)
            cur.executemany(
                "INSERT INTO onboarding_steps(submission_id, step_type, status) VALUES(%s,%s,%s)",
                [(submission_id, t.value, OnboardingStepStatus.PENDING.value) for t in step_types],
            )
            return submission_id

    def get_submission(self, *, submission_id: int) -> Optional[OnboardingSubmission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SUBMISSION_SELECT} WHERE s.submission_id=%s", (int(submission_id),))
            r = fetchone(cur)
            return _row_to_submission(r) if r else None

    def latest_for_employee(self, *, employee_id: int) -> Optional[OnboardingSubmission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SUBMISSION_SELECT} WHERE s.employee_id=%s ORDER BY s.created_at DESC, s.submission_id DESC LIMIT 1",
                (int(employee_id),),
            )
            r = fetchone(cur)
            return _row_to_submission(r) if r else None

    def list_submissions(
        self, *, status: Optional[OnboardingStatus] = None, limit: int = 200
    ) -> Sequence[OnboardingSubmission]:
        where, params = build_where([("s.status=%s", status)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SUBMISSION_SELECT} WHERE {where} ORDER BY s.created_at DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_submission(r) for r in fetchall(cur)]

    def update_submission(self, *, submission_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="onboarding_submissions",
                id_column="submission_id",
                row_id=submission_id,
                expected_version=expected_version,
                values=values,
            )

    def get_step(self, *, step_id: int) -> Optional[OnboardingStep]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STEP_COLUMNS} FROM onboarding_steps WHERE step_id=%s", (int(step_id),))
            r = fetchone(cur)
            return _row_to_step(r) if r else None

    def list_steps(self, *, submission_id: int) -> Sequence[OnboardingStep]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STEP_COLUMNS} FROM onboarding_steps WHERE submission_id=%s ORDER BY step_id",
                (int(submission_id),),
            )
            return [_row_to_step(r) for r in fetchall(cur)]

    def update_step(self, *, step_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        values = dict(values)
        if values.get("step_data") is not None:
            values["step_data"] = json.dumps(values["step_data"], default=str)
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="onboarding_steps",
                id_column="step_id",
                row_id=step_id,
                expected_version=expected_version,
                values=values,
            )

    def count_by_status(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status, COUNT(*) AS count FROM onboarding_submissions GROUP BY status")
            return [{"status": r["status"], "count": int(r["count"])} for r in fetchall(cur)]
