from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ConstructionSite:
    """Domain entity: a construction site (obra) with its geofence."""

    site_id: int
    name: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius_m: int = 100
    is_active: bool = True

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None
