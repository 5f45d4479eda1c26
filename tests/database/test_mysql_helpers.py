from __future__ import annotations

import mysql.connector
import pytest
from mysql.connector import errorcode

from event_attendance.core.exceptions import TransientStoreError
from event_attendance.database.bootstrap import iter_sql_statements, load_schema_statements
from event_attendance.database.mysql_base import db_cursor, duplicate_key_name, is_duplicate_key, is_missing_reference


def _dup(key: str) -> mysql.connector.errors.IntegrityError:
    return mysql.connector.errors.IntegrityError(
        msg=f"Duplicate entry '7-3' for key '{key}'",
        errno=errorcode.ER_DUP_ENTRY,
    )


def test_duplicate_key_detection():
    assert is_duplicate_key(_dup("uq_attendance_event_participant"))
    assert not is_duplicate_key(mysql.connector.errors.IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2))
    assert not is_duplicate_key(ValueError("x"))


def test_missing_reference_detection():
    assert is_missing_reference(mysql.connector.errors.IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2))
    assert not is_missing_reference(_dup("uq_attendance_event_participant"))


@pytest.mark.parametrize(
    "key,expected",
    [
        ("uq_events_access_code", "uq_events_access_code"),
        ("attendance.uq_attendance_event_participant", "uq_attendance_event_participant"),
    ],
)
def test_duplicate_key_name_strips_table_prefix(key, expected):
    assert duplicate_key_name(_dup(key)) == expected


class _FakeCursor:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class _FakeConn:
    def __init__(self):
        self.cursor_obj = _FakeCursor()
        self.committed = self.rolled_back = self.closed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class _Factory:
    def __init__(self, conn=None, error=None):
        self.conn = conn
        self.error = error

    def connect(self):
        if self.error:
            raise self.error
        return self.conn


def test_db_cursor_commits_and_closes():
    conn = _FakeConn()

    with db_cursor(_Factory(conn)) as (c, cur):
        assert c is conn and cur is conn.cursor_obj

    assert conn.committed and conn.closed and conn.cursor_obj.closed


def test_db_cursor_rolls_back_and_reraises_integrity_errors():
    conn = _FakeConn()

    with pytest.raises(mysql.connector.errors.IntegrityError):
        with db_cursor(_Factory(conn)):
            raise _dup("uq_events_access_code")

    assert conn.rolled_back and not conn.committed and conn.closed


def test_connection_failures_become_transient():
    with pytest.raises(TransientStoreError):
        with db_cursor(_Factory(error=mysql.connector.errors.InterfaceError(msg="refused"))):
            pass

    conn = _FakeConn()
    with pytest.raises(TransientStoreError):
        with db_cursor(_Factory(conn)):
            raise mysql.connector.errors.OperationalError(msg="gone away")
    assert conn.rolled_back


def test_schema_splits_into_create_statements():
    statements = load_schema_statements()

    tables = [s.split("(")[0].split()[-1].strip("`") for s in statements if s.upper().startswith("CREATE TABLE")]
    assert tables == ["users", "event_groups", "events", "participants", "attendance"]


def test_semicolons_inside_quotes_do_not_split():
    sql = "INSERT INTO t VALUES ('a;b', \"c;d\");\nSELECT 1"

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b', \"c;d\")", "SELECT 1"]
