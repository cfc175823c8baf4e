from __future__ import annotations

import re
from datetime import timedelta
from pathlib import Path
from typing import Iterable

import mysql.connector

from ..common.datetime_utils import now_utc
from .connection import DBConfig


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for the schema file (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)

    sql = Path(schema_path).read_text(encoding="utf-8")
    sql = _strip_create_db_and_use(_strip_comments(sql))

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_demo_task(db_config: dict, *, assigned_user_id: str = "demo-agent") -> None:
    """Insert one demo task (window: now -1h .. now +3h) unless its pack code exists."""
    start = now_utc().replace(microsecond=0) - timedelta(hours=1)
    end = start + timedelta(hours=4)

    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SELECT task_id FROM tasks WHERE sealed_pack_code=%s", ("DEMO-PACK-001",))
        if cur.fetchone() is None:
            cur.execute(
                """
                INSERT INTO tasks (
                    task_id, sealed_pack_code, source_location, destination_location,
                    pickup_latitude, pickup_longitude, destination_latitude, destination_longitude,
                    assigned_user_id, start_time, end_time, status, geofence_radius, created_at
                )
                VALUES (UUID(), %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, 'PENDING', %s, %s)
                """,
                (
                    "DEMO-PACK-001",
                    "Panbazar Police Station, Guwahati",
                    "Cotton University Exam Center, Guwahati",
                    26.1862, 91.7457, 26.1869, 91.7468,
                    assigned_user_id,
                    start,
                    end,
                    100,
                    now_utc(),
                ),
            )
        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
