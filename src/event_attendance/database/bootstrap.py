"""Create the database and apply ``schema.sql``.

Every statement in the schema is idempotent (``IF NOT EXISTS``), so this runs
safely on each start when ``AUTO_INIT_DB`` is set.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

# Quoted strings are single tokens, so a ';' inside them never ends a statement.
_TOKEN_RE = re.compile(r"""'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|;|[^'";]+|['"]""", re.S)
_COMMENT_RE = re.compile(r"(?m)^\s*--.*$")
# The database name comes from settings, not from the file.
_DB_SELECTION_RE = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;")


def iter_sql_statements(sql: str) -> Iterator[str]:
    current: list[str] = []
    for match in _TOKEN_RE.finditer(sql):
        token = match.group(0)
        if token != ";":
            current.append(token)
            continue
        statement = "".join(current).strip()
        current = []
        if statement:
            yield statement

    tail = "".join(current).strip()
    if tail:
        yield tail


def load_schema_statements(schema_path: str | Path = SCHEMA_PATH) -> list[str]:
    sql = Path(schema_path).read_text(encoding="utf-8")
    sql = _DB_SELECTION_RE.sub("", _COMMENT_RE.sub("", sql))
    return list(iter_sql_statements(sql))


def ensure_database_exists(db_config: dict) -> None:
    factory = DatabaseConnection(DBConfig.from_dict(db_config))
    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> int:
    """Returns the number of statements executed."""

    ensure_database_exists(db_config)
    statements = load_schema_statements(schema_path)

    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        for statement in statements:
            cur.execute(statement)
        conn.commit()
    finally:
        conn.close()

    logger.info("Applied %s schema statements from %s", len(statements), Path(schema_path).name)
    return len(statements)


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
