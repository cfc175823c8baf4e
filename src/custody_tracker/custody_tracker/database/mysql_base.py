from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StorageUnavailableError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_TRANSIENT_ERRNOS = {errorcode.ER_LOCK_WAIT_TIMEOUT, errorcode.ER_LOCK_DEADLOCK}


def is_transient(exc: mysql.connector.Error) -> bool:
    if isinstance(exc, (mysql.connector.errors.OperationalError, mysql.connector.errors.InterfaceError)):
        return True
    return exc.errno in _TRANSIENT_ERRNOS


def is_duplicate_key(exc: mysql.connector.Error) -> bool:
    return isinstance(exc, mysql.connector.errors.IntegrityError) and exc.errno == errorcode.ER_DUP_ENTRY


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, rollback on any error.

    Connection loss, lock-wait timeouts and deadlocks surface as
    ``StorageUnavailableError`` so callers can tell them apart from rule violations.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise StorageUnavailableError("Database is unavailable, please retry") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            _quietly(cur.close, "cursor close")
    except mysql.connector.Error as exc:
        _quietly(conn.rollback, "rollback")
        if is_transient(exc):
            raise StorageUnavailableError("Database is unavailable, please retry") from exc
        raise
    except Exception:
        _quietly(conn.rollback, "rollback")
        raise
    finally:
        _quietly(conn.close, "connection close")


def _quietly(action, what: str) -> None:
    # A dropped connection fails again on cleanup; the first error is the one to report.
    try:
        action()
    except mysql.connector.Error as exc:
        logger.warning("MySQL %s failed: %s", what, exc)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_float(value: Any) -> Optional[float]:
    """DECIMAL columns come back as ``Decimal``; the domain works in floats."""
    if value is None:
        return None
    return float(value)


def as_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return bool(int(value))


def as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
