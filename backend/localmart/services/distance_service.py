from __future__ import annotations

import math

EARTH_RADIUS_KM = 6371.0
STRAIGHT_LINE_MINUTES_PER_KM = 2.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km between two points given in degrees."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    half_d_phi = math.radians(lat2 - lat1) / 2
    half_d_lambda = math.radians(lon2 - lon1) / 2
    h = math.sin(half_d_phi) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(half_d_lambda) ** 2
    # Rounding can push h just past 1 for near-antipodal points.
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))


def straight_line_minutes(distance_km: float) -> int:
    # Rough door-to-door estimate used when no routing provider answers.
    return int(math.floor(max(0.0, distance_km) * STRAIGHT_LINE_MINUTES_PER_KM + 0.5))


def bounding_box(lat: float, lon: float, radius_km: float) -> tuple[float, float, float, float]:
    """Return (min_lat, max_lat, min_lon, max_lon) enclosing a circle of ``radius_km``.

    The box is a superset of the circle, so callers still apply the exact
    great-circle check to whatever the box lets through. When the circle
    touches a pole or crosses the antimeridian the longitude span is widened
    to the full range.
    """
    angular = max(0.0, radius_km) / EARTH_RADIUS_KM
    lat_delta = math.degrees(angular)
    min_lat = lat - lat_delta
    max_lat = lat + lat_delta
    if min_lat <= -90.0 or max_lat >= 90.0:
        return max(-90.0, min_lat), min(90.0, max_lat), -180.0, 180.0

    lon_delta = math.degrees(math.asin(min(1.0, math.sin(angular) / math.cos(math.radians(lat)))))
    min_lon = lon - lon_delta
    max_lon = lon + lon_delta
    if min_lon < -180.0 or max_lon > 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, min_lon, max_lon
