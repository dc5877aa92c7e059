from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import PersistenceError
from .connection import DatabaseConnection

log = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (connection, cursor) and commit on success.

    Connector failures surface as PersistenceError so services never see
    driver-specific exceptions.
    """

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise PersistenceError(f"Cannot connect to database: {e}") from e

    committed = False
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
            committed = True
        finally:
            cur.close()
    except mysql.connector.Error as e:
        raise PersistenceError(str(e)) from e
    finally:
        _release(conn, rollback=not committed)


def _release(conn, *, rollback: bool = False) -> None:
    # A timed out connection may already be gone; the original error matters more.
    try:
        if rollback:
            conn.rollback()
    except mysql.connector.Error as e:
        log.warning("rollback failed: %s", e)
    finally:
        try:
            conn.close()
        except mysql.connector.Error as e:
            log.warning("closing connection failed: %s", e)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_decimal(value: Any) -> Optional[Decimal]:
    """DECIMAL columns come back as Decimal, but FLOAT/str legacy columns do not."""

    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
