from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import TransientStoreError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (connection, cursor); commit on success, roll back on error.

    Connection-level failures surface as TransientStoreError. Integrity errors
    propagate unchanged so repositories can map them to domain conflicts.
    """

    try:
        conn = conn_factory.connect()
    except (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError) as exc:
        raise TransientStoreError(f"Database unavailable: {exc}") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError) as exc:
        _safe_rollback(conn)
        raise TransientStoreError(f"Database operation failed: {exc}") from exc
    except Exception:
        _safe_rollback(conn)
        raise
    finally:
        conn.close()


def _safe_rollback(conn) -> None:
    try:
        conn.rollback()
    except mysql.connector.Error:
        # Connection already gone; the server discards the transaction.
        pass


def is_duplicate_key(exc: BaseException) -> bool:
    return isinstance(exc, mysql.connector.errors.IntegrityError) and getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def is_missing_reference(exc: BaseException) -> bool:
    """Insert pointed at a parent row that no longer exists."""
    return (
        isinstance(exc, mysql.connector.errors.IntegrityError)
        and getattr(exc, "errno", None) == errorcode.ER_NO_REFERENCED_ROW_2
    )


def duplicate_key_name(exc: BaseException) -> str:
    """Name of the violated unique key, parsed from the MySQL message."""
    message = str(getattr(exc, "msg", "") or exc)
    marker = "for key '"
    if marker not in message:
        return ""
    key = message.split(marker, 1)[1].split("'", 1)[0]
    # MySQL 8 prefixes the table name: 'attendance.uq_attendance_event_participant'
    return key.rsplit(".", 1)[-1]


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
