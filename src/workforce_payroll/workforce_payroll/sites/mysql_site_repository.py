from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ConstructionSite
from .repository import SiteRepository


class MySQLSiteRepository(SiteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, site_id: int) -> Optional[ConstructionSite]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT site_id, name, latitude, longitude, radius_m, is_active
                FROM construction_sites
                WHERE site_id=%s
                """,
                (int(site_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ConstructionSite(
                site_id=int(r["site_id"]),
                name=r["name"],
                latitude=float(r["latitude"]) if r.get("latitude") is not None else None,
                longitude=float(r["longitude"]) if r.get("longitude") is not None else None,
                radius_m=int(r.get("radius_m") or 100),
                is_active=bool(r.get("is_active", 1)),
            )
