"""Schema setup for the payroll database.

`schema.sql` only uses CREATE TABLE IF NOT EXISTS, so applying it again on
every start is harmless.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Mapping, Union

import mysql.connector

from ..core.exceptions import PersistenceError
from .connection import DBConfig, DatabaseConnection

log = logging.getLogger(__name__)

REQUIRED_TABLES = (
    "construction_sites",
    "employees",
    "attendance_records",
    "payroll_estimations",
    "payroll_automation_state",
    "activity_logs",
)

_CREATE_DATABASE = re.compile(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$")
_USE_DATABASE = re.compile(r"(?im)^\s*USE\b.*?;\s*$")


def _factory(db_config: Union[Mapping, DBConfig]) -> DatabaseConnection:
    config = db_config if isinstance(db_config, DBConfig) else DBConfig.from_mapping(db_config)
    return DatabaseConnection(config)


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';' outside quotes. `--` line comments are dropped."""

    buf: List[str] = []
    quote = None
    escape = False

    for line in sql.splitlines(keepends=True):
        if quote is None and line.lstrip().startswith("--"):
            continue
        for ch in line:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif quote is not None:
                if ch == quote:
                    quote = None
            elif ch in ("'", '"'):
                quote = ch
            elif ch == ";":
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                continue
            buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(factory: DatabaseConnection, statements: Iterable[str], *, with_database: bool = True) -> int:
    count = 0
    try:
        conn = factory.connect(with_database=with_database)
        try:
            cur = conn.cursor()
            for stmt in statements:
                cur.execute(stmt)
                count += 1
            conn.commit()
        finally:
            conn.close()
    except mysql.connector.Error as e:
        raise PersistenceError(f"Schema setup failed on {factory.config.describe()}: {e}") from e
    return count


def ensure_database_exists(db_config: Union[Mapping, DBConfig]) -> None:
    factory = _factory(db_config)
    name = factory.config.database
    _run_script(
        factory,
        [f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"],
        with_database=False,
    )


def apply_schema(db_config: Union[Mapping, DBConfig], *, schema_path: Union[str, Path]) -> int:
    """Create the database if needed and run every statement of `schema_path`.

    CREATE DATABASE / USE lines in the file are ignored; the configured
    database name wins. Returns the number of statements executed.
    """

    ensure_database_exists(db_config)
    sql = Path(schema_path).read_text(encoding="utf-8")
    sql = _USE_DATABASE.sub("", _CREATE_DATABASE.sub("", sql))

    factory = _factory(db_config)
    count = _run_script(factory, iter_sql_statements(sql))
    log.info("applied %s schema statements to %s", count, factory.config.describe())
    return count


def list_tables(db_config: Union[Mapping, DBConfig]) -> List[str]:
    factory = _factory(db_config)
    try:
        conn = factory.connect()
        try:
            cur = conn.cursor()
            cur.execute("SHOW TABLES")
            return [row[0] for row in cur.fetchall()]
        finally:
            conn.close()
    except mysql.connector.Error as e:
        raise PersistenceError(f"Cannot list tables on {factory.config.describe()}: {e}") from e


def missing_tables(db_config: Union[Mapping, DBConfig]) -> List[str]:
    present = set(list_tables(db_config))
    return [t for t in REQUIRED_TABLES if t not in present]
