from __future__ import annotations

import math
from typing import Optional, Tuple

EARTH_RADIUS_M = 6371000


def distance_m(lat1: Optional[float], lon1: Optional[float], lat2: Optional[float], lon2: Optional[float]) -> float:
    """Great-circle distance in meters between two points (Haversine).

    Missing coordinates yield infinity so they never pass a radius check.
    """
    if lat1 is None or lon1 is None or lat2 is None or lon2 is None:
        return float("inf")

    lat1, lon1, lat2, lon2 = map(float, [lat1, lon1, lat2, lon2])

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2.0) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def check_geofence(
    lat: Optional[float], lon: Optional[float], site_lat: float, site_lon: float, radius_m: int
) -> Tuple[bool, float]:
    """Returns (is_inside, distance_m)."""
    dist = distance_m(lat, lon, site_lat, site_lon)
    return dist <= radius_m, dist
