# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects, no imports from other project modules except the data types.

import math

from .models import GeoPoint


EARTH_RADIUS_M = 6_371_000.0


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """
    Great-circle (haversine) distance between two points in metres.

    Args:
        a: Origin.
        b: Destination.

    Returns:
        Distance in metres.
    """
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.lat))
        * math.cos(math.radians(b.lat))
        * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def initial_bearing_degrees(a: GeoPoint, b: GeoPoint) -> float:
    """
    Forward azimuth (bearing) from a to b in degrees [0, 360).

    Identical points give 0.0.

    Args:
        a: Origin.
        b: Destination.

    Returns:
        Bearing in degrees, clockwise from north.
    """
    if a == b:
        return 0.0
    rlat1, rlat2 = math.radians(a.lat), math.radians(b.lat)
    d_lng = math.radians(b.lng - a.lng)
    y = math.sin(d_lng) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(d_lng)
    return normalize_bearing(math.degrees(math.atan2(y, x)))


def normalize_bearing(degrees: float) -> float:
    """Wrap any angle into [0, 360)."""
    wrapped = degrees % 360.0
    # -1e-17 % 360 rounds up to exactly 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def normalize_relative_angle(degrees: float) -> float:
    """Wrap any angle into (-180, 180]."""
    wrapped = 180.0 - (180.0 - degrees) % 360.0
    return 180.0 if wrapped <= -180.0 else wrapped


def format_distance(meters: float) -> str:
    """Short distance phrase shown next to the direction cue."""
    if meters < 1000:
        return f"In {round(meters)} meters"
    return f"In {meters / 1000:.1f} km"
