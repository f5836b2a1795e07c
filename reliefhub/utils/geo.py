"""
Geo utilities - haversine distance and bounding-box helpers.

Pure functions, no state. The only failure mode is an out-of-range or
non-finite coordinate, reported as InvalidCoordinateError.
"""

import math
from typing import Tuple

from reliefhub.core.errors import InvalidCoordinateError
from reliefhub.models.base import GeoPoint

EARTH_RADIUS_METERS = 6371000.0

# Slack for degree rounding at the box edges
_BOX_TOLERANCE_DEGREES = 1e-9


def validate_coordinate(latitude: float, longitude: float) -> None:
    """
    Reject latitudes outside [-90, 90], longitudes outside [-180, 180]
    and anything that is not a finite number.
    """
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise InvalidCoordinateError(latitude, longitude)

    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidCoordinateError(latitude, longitude)
    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
        raise InvalidCoordinateError(latitude, longitude)


def validate_point(point: GeoPoint) -> GeoPoint:
    validate_coordinate(point.latitude, point.longitude)
    return point


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points using Haversine formula."""
    validate_coordinate(lat1, lon1)
    validate_coordinate(lat2, lon2)

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push a slightly above 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters between two GeoPoints."""
    return haversine_meters(a.latitude, a.longitude, b.latitude, b.longitude)


def bounding_box(origin: GeoPoint, radius_meters: float) -> Tuple[float, float, float, float]:
    """
    Return (min_lat, min_lon, max_lat, max_lon) enclosing the circle of
    radius_meters around origin.

    The box is a cheap pre-filter: every point within the radius is inside
    it, but not every point inside it is within the radius. Near the poles,
    or when the circle crosses the antimeridian, the longitude span widens
    to the full [-180, 180] range.
    """
    validate_point(origin)
    # Small slack so points exactly on the circle are not clipped by rounding
    angular = max(0.0, float(radius_meters)) / EARTH_RADIUS_METERS * 1.0001

    lat = math.radians(origin.latitude)
    min_lat = lat - angular
    max_lat = lat + angular

    if min_lat <= -math.pi / 2 or max_lat >= math.pi / 2:
        return (
            max(-90.0, math.degrees(min_lat)),
            -180.0,
            min(90.0, math.degrees(max_lat)),
            180.0,
        )

    ratio = math.sin(angular) / math.cos(lat)
    if ratio >= 1.0:
        return math.degrees(min_lat), -180.0, math.degrees(max_lat), 180.0

    delta_lon = math.degrees(math.asin(ratio))
    min_lon = origin.longitude - delta_lon
    max_lon = origin.longitude + delta_lon
    if min_lon < -180.0 or max_lon > 180.0:
        return math.degrees(min_lat), -180.0, math.degrees(max_lat), 180.0

    return math.degrees(min_lat), min_lon, math.degrees(max_lat), max_lon

def within_bounding_box(point: GeoPoint, box: Tuple[float, float, float, float]) -> bool:
    min_lat, min_lon, max_lat, max_lon = box
    tol = _BOX_TOLERANCE_DEGREES
    return (
        min_lat - tol <= point.latitude <= max_lat + tol
        and min_lon - tol <= point.longitude <= max_lon + tol
    )


def format_distance(meters: float) -> str:
    """Human-readable distance used in recommendation metadata."""
    if meters < 1000:
        return f"{int(round(meters))} m"
    return f"{meters / 1000:.1f} km"
