from __future__ import annotations

import json

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import ActivityEntry
from .repository import ActivityRepository


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, entry: ActivityEntry) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_logs(user_id, role, action, module, description, metadata, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.user_id,
                    entry.role,
                    entry.action,
                    entry.module,
                    entry.description,
                    json.dumps(entry.metadata, default=str),
                    entry.created_at,
                ),
            )
