"""Schema/seed helpers used by ``create_app`` and the scripts/ entry points."""
from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

# (name, email, password, role, employee code, first, last, department, position, salary, hire date)
DEMO_ACCOUNTS = (
    ("Admin Demo", "admin@hrportal.local", "admin123", "ADMIN", "EMP001", "Admin", "Demo",
     "Human Resources", "HR Director", "95000.00", date(2020, 1, 6)),
    ("Maya Manager", "manager@hrportal.local", "manager123", "MANAGER", "EMP002", "Maya", "Manager",
     "Engineering", "Engineering Manager", "72000.00", date(2021, 3, 1)),
    ("Evan Employee", "employee@hrportal.local", "employee123", "EMPLOYEE", "EMP003", "Evan", "Employee",
     "Engineering", "Software Engineer", "18000.00", date(2023, 7, 17)),
)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql names a database; the configured one wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split on ``;`` outside of quoted strings."""
    buf: list[str] = []
    quote = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
            continue
        if ch == "\\":
            escape = True
            continue
        if ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            continue
        if ch == ";" and quote is None:
            buf.pop()
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


@contextmanager
def _connect(db_config: dict, *, with_database: bool = True) -> Iterator:
    target = DBConfig.from_dict(db_config)
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    conn = mysql.connector.connect(**kwargs)
    try:
        yield conn
    finally:
        conn.close()


def _run_script(db_config: dict, path: Path) -> int:
    sql = _strip_create_db_and_use(_strip_comments(Path(path).read_text(encoding="utf-8")))
    count = 0
    with _connect(db_config) as conn:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    return count


def ensure_database_exists(db_config: dict) -> None:
    name = DBConfig.from_dict(db_config).database
    with _connect(db_config, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, Path(schema_path))
    logger.info("Applied %s schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, Path(seed_path))
    logger.info("Applied %s seed statements from %s", count, seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert one login per role, each linked to an employees row."""
    with _connect(db_config) as conn:
        cur = conn.cursor(dictionary=True)

        def department_id(name: str) -> int:
            cur.execute("SELECT department_id FROM departments WHERE name=%s", (name,))
            row = cur.fetchone()
            if not row:
                raise RuntimeError(f"Missing department {name!r}; apply seed.sql first")
            return int(row["department_id"])

        for (name, email, password, role, code, first, last, dept, position, salary, hired) in DEMO_ACCOUNTS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                user_id = int(existing["user_id"])
                cur.execute(
                    "UPDATE users SET name=%s, password_hash=%s, role=%s, is_active=1 WHERE user_id=%s",
                    (name, password_hash, role, user_id),
                )
            else:
                cur.execute(
                    "INSERT INTO users (name, email, password_hash, role) VALUES (%s, %s, %s, %s)",
                    (name, email, password_hash, role),
                )
                user_id = int(cur.lastrowid)

            cur.execute(
                """
                INSERT INTO employees (user_id, employee_code, first_name, last_name, email,
                                       department_id, position, salary, hire_date)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE user_id=VALUES(user_id), department_id=VALUES(department_id),
                                        position=VALUES(position), is_active=1
                """,
                (user_id, code, first, last, email, department_id(dept), position, salary, hired),
            )

        conn.commit()
    logger.info("Demo accounts ready (%s)", ", ".join(a[1] for a in DEMO_ACCOUNTS))


def list_tables(db_config: dict) -> list[str]:
    with _connect(db_config) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
