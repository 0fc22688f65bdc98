"""
Great-circle distance on a fixed-radius sphere (spherical law of cosines).
"""
import math

# Sphere radius in meters. Kept as-is; reported distances depend on it.
EARTH_RADIUS_M = 6378137


def js_round(value: float) -> int:
    """Round half up, matching the upstream API client's rounding."""
    return math.floor(value + 0.5)


def geo_distance(
    start_lat: float,
    start_lng: float,
    end_lat: float,
    end_lng: float,
    granularity: float = 1,
) -> int:
    """
    Distance in meters between two points (degrees), rounded to the nearest
    multiple of granularity. Granularity is floored; anything below 1 means 1.
    """
    step = math.floor(granularity) if granularity else 1
    if step < 1:
        step = 1
    s_lat = math.radians(start_lat)
    e_lat = math.radians(end_lat)
    cos_angle = math.sin(e_lat) * math.sin(s_lat) + math.cos(e_lat) * math.cos(s_lat) * math.cos(
        math.radians(start_lng) - math.radians(end_lng)
    )
    # Float error can push the cosine just past +/-1 for identical points.
    cos_angle = max(-1.0, min(1.0, cos_angle))
    distance = js_round(math.acos(cos_angle) * EARTH_RADIUS_M)
    return math.floor(js_round(distance / step) * step)
