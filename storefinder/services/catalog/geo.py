import math
from typing import Optional

# Spherical earth radius used for $near-style distance queries
EARTH_RADIUS_M = 6378100.0

# slack for float rounding at the box edge, about 0.1 m
BOX_MARGIN_DEG = 1e-6


def haversine_m(lng1: float, lat1: float, lng2: float, lat2: float) -> float:
    """Great-circle distance in metres between two [lng, lat] points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(
    lng: float, lat: float, radius_m: float
) -> tuple[float, float, Optional[tuple[float, float]]]:
    """
    Coarse (min_lat, max_lat, (min_lng, max_lng)) box around a point, used to narrow
    candidates before the exact distance check. The longitude range is None when the
    box reaches a pole or crosses the antimeridian, in which case only latitude filters.

    The longitude half-width is the circle's true widest point,
    asin(sin(r/R) / cos(lat)), not the flat r / (R cos(lat)) approximation.
    """
    angle = radius_m / EARTH_RADIUS_M
    dlat = math.degrees(angle) + BOX_MARGIN_DEG
    min_lat, max_lat = lat - dlat, lat + dlat
    if min_lat <= -90 or max_lat >= 90:
        return max(min_lat, -90.0), min(max_lat, 90.0), None

    spread = math.sin(angle) / math.cos(math.radians(lat))
    if spread >= 1:
        return min_lat, max_lat, None
    dlng = math.degrees(math.asin(spread)) + BOX_MARGIN_DEG
    min_lng, max_lng = lng - dlng, lng + dlng
    if min_lng < -180 or max_lng > 180:
        return min_lat, max_lat, None
    return min_lat, max_lat, (min_lng, max_lng)
