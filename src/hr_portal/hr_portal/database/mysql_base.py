from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[tuple[Any, Any]]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def build_where(filters: Sequence[tuple[str, Any]]) -> tuple[str, list]:
    """``[("r.status=%s", value), ...]`` to a WHERE body; ``None`` values are skipped."""
    clauses = ["1=1"]
    params: list[object] = []
    for clause, value in filters:
        if value is None:
            continue
        clauses.append(clause)
        params.append(value.value if hasattr(value, "value") else value)
    return " AND ".join(clauses), params


def conditional_update(
    cur,
    *,
    table: str,
    id_column: str,
    row_id: int,
    expected_version: int,
    values: Dict[str, Any],
) -> bool:
    """Compare-and-set on ``version``: returns False when the row moved on.

    ``values`` keys are trusted column names from repository code, never user input.
    """
    assignments = ", ".join(f"{col}=%s" for col in values)
    params = [v.value if hasattr(v, "value") else v for v in values.values()]
    cur.execute(
        f"UPDATE {table} SET {assignments}, version=version+1 WHERE {id_column}=%s AND version=%s",
        tuple(params + [int(row_id), int(expected_version)]),
    )
    return cur.rowcount == 1


def update_row(cur, *, table: str, id_column: str, row_id: int, values: Dict[str, Any]) -> None:
    """Unconditional UPDATE for tables without a ``version`` column."""
    assignments = ", ".join(f"{col}=%s" for col in values)
    params = [v.value if hasattr(v, "value") else v for v in values.values()]
    cur.execute(f"UPDATE {table} SET {assignments} WHERE {id_column}=%s", tuple(params + [int(row_id)]))


def insert_row(cur, *, table: str, values: Dict[str, Any]) -> int:
    cols = list(values)
    params = [v.value if hasattr(v, "value") else v for v in values.values()]
    cur.execute(
        f"INSERT INTO {table}({', '.join(cols)}) VALUES({', '.join(['%s'] * len(cols))})",
        tuple(params),
    )
    return int(cur.lastrowid)


def as_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return value if isinstance(value, Decimal) else Decimal(str(value))
