from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import (
    CycleStatus,
    CycleType,
    GoalCategory,
    GoalPriority,
    GoalStatus,
    ReviewRating,
    ReviewStatus,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    build_where,
    conditional_update,
    db_cursor,
    fetchall,
    fetchone,
    insert_row,
)
from .model import GoalUpdate, PerformanceGoal, PerformanceReview, ReviewCycle
from .repository import GoalRepository, ReviewCycleRepository, ReviewRepository

_CYCLE_SELECT = """
    SELECT c.cycle_id, c.name, c.cycle_type, c.start_date, c.end_date, c.status, c.version,
           c.created_by, c.created_at,
           (SELECT COUNT(*) FROM performance_reviews r WHERE r.cycle_id = c.cycle_id) AS review_count
    FROM review_cycles c
"""

_GOAL_COLUMNS = """
    goal_id, employee_id, title, description, target, category, priority, status,
    start_date, end_date, progress, version, created_at
"""

_REVIEW_SELECT = """
    SELECT r.review_id, r.employee_id, r.cycle_id, r.review_type, r.rating, r.status, r.reviewed_by,
           r.goal_id, r.comments, r.strengths, r.improvements, r.reviewed_at, r.created_at, r.version,
           CONCAT(e.first_name, ' ', e.last_name) AS employee_name,
           c.name AS cycle_name
    FROM performance_reviews r
    JOIN employees e ON e.employee_id = r.employee_id
    JOIN review_cycles c ON c.cycle_id = r.cycle_id
"""


def _row_to_cycle(r: dict) -> ReviewCycle:
    return ReviewCycle(
        cycle_id=int(r["cycle_id"]),
        name=r["name"],
        cycle_type=CycleType(r["cycle_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=CycleStatus(r["status"]),
        version=int(r["version"]),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
        review_count=int(r.get("review_count") or 0),
    )


def _row_to_goal(r: dict) -> PerformanceGoal:
    return PerformanceGoal(
        goal_id=int(r["goal_id"]),
        employee_id=int(r["employee_id"]),
        title=r["title"],
        description=r["description"],
        target=r["target"],
        category=GoalCategory(r["category"]),
        priority=GoalPriority(r["priority"]),
        status=GoalStatus(r["status"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        progress=int(r.get("progress") or 0),
        version=int(r["version"]),
        created_at=r.get("created_at"),
    )


def _row_to_review(r: dict) -> PerformanceReview:
    return PerformanceReview(
        review_id=int(r["review_id"]),
        employee_id=int(r["employee_id"]),
        cycle_id=int(r["cycle_id"]),
        review_type=CycleType(r["review_type"]),
        rating=ReviewRating(r["rating"]),
        status=ReviewStatus(r["status"]),
        reviewed_by=int(r["reviewed_by"]),
        goal_id=r.get("goal_id"),
        comments=r.get("comments"),
        strengths=r.get("strengths"),
        improvements=r.get("improvements"),
        reviewed_at=r.get("reviewed_at"),
        created_at=r.get("created_at"),
        version=int(r["version"]),
        employee_name=r.get("employee_name"),
        cycle_name=r.get("cycle_name"),
    )


class MySQLReviewCycleRepository(ReviewCycleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, values: dict[str, Any]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_row(cur, table="review_cycles", values=values)

    def get(self, *, cycle_id: int) -> Optional[ReviewCycle]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_CYCLE_SELECT} WHERE c.cycle_id=%s", (int(cycle_id),))
            r = fetchone(cur)
            return _row_to_cycle(r) if r else None

    def list_cycles(self, *, status: Optional[CycleStatus] = None, limit: int = 200) -> Sequence[ReviewCycle]:
        where, params = build_where([("c.status=%s", status)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_CYCLE_SELECT} WHERE {where} ORDER BY c.start_date DESC, c.cycle_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_cycle(r) for r in fetchall(cur)]

    def update(self, *, cycle_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="review_cycles",
                id_column="cycle_id",
                row_id=cycle_id,
                expected_version=expected_version,
                values=values,
            )

    def delete(self, *, cycle_id: int, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE FROM review_cycles
                WHERE cycle_id=%s AND version=%s
                  AND NOT EXISTS (SELECT 1 FROM performance_reviews r WHERE r.cycle_id=%s)
                """,
                (int(cycle_id), int(expected_version), int(cycle_id)),
            )
            return cur.rowcount == 1


class MySQLGoalRepository(GoalRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, employee_id: int, values: dict[str, Any]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_row(cur, table="performance_goals", values={**values, "employee_id": int(employee_id)})

    def get(self, *, goal_id: int) -> Optional[PerformanceGoal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_GOAL_COLUMNS} FROM performance_goals WHERE goal_id=%s", (int(goal_id),))
            r = fetchone(cur)
            return _row_to_goal(r) if r else None

    def list_goals(
        self,
        *,
        employee_id: int,
        status: Optional[GoalStatus] = None,
        category: Optional[GoalCategory] = None,
        limit: int = 200,
    ) -> Sequence[PerformanceGoal]:
        where, params = build_where(
            [("employee_id=%s", int(employee_id)), ("status=%s", status), ("category=%s", category)]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_GOAL_COLUMNS} FROM performance_goals WHERE {where} ORDER BY created_at DESC, goal_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_goal(r) for r in fetchall(cur)]

    def update(self, *, goal_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="performance_goals",
                id_column="goal_id",
                row_id=goal_id,
                expected_version=expected_version,
                values=values,
            )

    def delete(self, *, goal_id: int, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM performance_goals WHERE goal_id=%s AND version=%s",
                (int(goal_id), int(expected_version)),
            )
            return cur.rowcount == 1

    def add_update(
        self,
        *,
        goal_id: int,
        expected_version: int,
        update_text: str,
        progress: int,
        created_by: int,
    ) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            if not conditional_update(
                cur,
                table="performance_goals",
                id_column="goal_id",
                row_id=goal_id,
                expected_version=expected_version,
                values={"progress": int(progress)},
            ):
                return None
            return insert_row(
                cur,
                table="goal_updates",
                values={
                    "goal_id": int(goal_id),
                    "update_text": update_text,
                    "progress": int(progress),
                    "created_by": int(created_by),
                },
            )

    def list_updates(self, *, goal_id: int) -> Sequence[GoalUpdate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT update_id, goal_id, update_text, progress, created_by, created_at
                FROM goal_updates
                WHERE goal_id=%s
                ORDER BY created_at DESC, update_id DESC
                """,
                (int(goal_id),),
            )
            return [
                GoalUpdate(
                    update_id=int(r["update_id"]),
                    goal_id=int(r["goal_id"]),
                    update_text=r["update_text"],
                    progress=int(r["progress"]),
                    created_by=int(r["created_by"]),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]


class MySQLReviewRepository(ReviewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, values: dict[str, Any]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_row(cur, table="performance_reviews", values=values)

    def get(self, *, review_id: int) -> Optional[PerformanceReview]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_REVIEW_SELECT} WHERE r.review_id=%s", (int(review_id),))
            r = fetchone(cur)
            return _row_to_review(r) if r else None

    def list_reviews(
        self,
        *,
        employee_id: Optional[int] = None,
        cycle_id: Optional[int] = None,
        status: Optional[ReviewStatus] = None,
        limit: int = 200,
    ) -> Sequence[PerformanceReview]:
        where, params = build_where(
            [("r.employee_id=%s", employee_id), ("r.cycle_id=%s", cycle_id), ("r.status=%s", status)]
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_REVIEW_SELECT} WHERE {where} ORDER BY r.created_at DESC, r.review_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_review(r) for r in fetchall(cur)]

    def update(self, *, review_id: int, expected_version: int, values: dict[str, Any]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return conditional_update(
                cur,
                table="performance_reviews",
                id_column="review_id",
                row_id=review_id,
                expected_version=expected_version,
                values=values,
            )

    def delete(self, *, review_id: int, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM performance_reviews WHERE review_id=%s AND version=%s",
                (int(review_id), int(expected_version)),
            )
            return cur.rowcount == 1
