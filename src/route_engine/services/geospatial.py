"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence

from shapely.geometry import Point, Polygon, box

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_valid_coordinate(lat: float, lon: float) -> bool:
    """Return True for finite latitude/longitude within WGS84 ranges."""

    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def service_area_polygon(bounds: Sequence[float]) -> Polygon:
    """Build a (lon, lat) polygon from (lat_min, lat_max, lng_min, lng_max)."""

    lat_min, lat_max, lng_min, lng_max = bounds
    return box(lng_min, lat_min, lng_max, lat_max)


def point_in_area(lat: float, lon: float, area: Polygon) -> bool:
    """Return True if the point lies inside or on the boundary of ``area``."""

    return area.covers(Point(lon, lat))
