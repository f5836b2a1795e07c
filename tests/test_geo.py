import math

import pytest

from reliefhub.core.errors import InvalidCoordinateError
from reliefhub.models.base import GeoPoint
from reliefhub.utils import geo

from tests.conftest import INDORE, METERS_PER_DEGREE_LAT


def destination(origin: GeoPoint, bearing_degrees: float, meters: float) -> GeoPoint:
    """Point reached travelling `meters` from origin on a great circle."""
    angular = meters / geo.EARTH_RADIUS_METERS
    bearing = math.radians(bearing_degrees)
    lat1 = math.radians(origin.latitude)
    lon1 = math.radians(origin.longitude)
    lat2 = math.asin(math.sin(lat1) * math.cos(angular) + math.cos(lat1) * math.sin(angular) * math.cos(bearing))
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    return GeoPoint(latitude=math.degrees(lat2), longitude=math.degrees(lon2))


def test_distance_to_self_is_zero():
    assert geo.distance_meters(INDORE, INDORE) == 0.0


def test_one_degree_of_latitude():
    a = GeoPoint(latitude=10.0, longitude=20.0)
    b = GeoPoint(latitude=11.0, longitude=20.0)
    assert geo.distance_meters(a, b) == pytest.approx(METERS_PER_DEGREE_LAT, abs=0.5)


def test_distance_is_symmetric():
    bhopal = GeoPoint(latitude=23.2599, longitude=77.4126)
    assert geo.distance_meters(INDORE, bhopal) == pytest.approx(geo.distance_meters(bhopal, INDORE))
    assert 160_000 < geo.distance_meters(INDORE, bhopal) < 180_000


def test_antipodal_points():
    a = GeoPoint(latitude=0.0, longitude=0.0)
    b = GeoPoint(latitude=0.0, longitude=180.0)
    assert geo.distance_meters(a, b) == pytest.approx(math.pi * geo.EARTH_RADIUS_METERS)


@pytest.mark.parametrize("lat, lon", [(90.5, 0), (-91, 0), (0, 180.01), (0, -181), (float("nan"), 0), (0, float("inf"))])
def test_out_of_range_coordinates_are_rejected(lat, lon):
    with pytest.raises(InvalidCoordinateError):
        geo.distance_meters(GeoPoint(latitude=lat, longitude=lon), INDORE)


def test_boundary_coordinates_are_accepted():
    geo.validate_coordinate(90, 180)
    geo.validate_coordinate(-90, -180)


@pytest.mark.parametrize("origin", [INDORE, GeoPoint(latitude=64.0, longitude=-21.9), GeoPoint(latitude=-33.9, longitude=151.2)])
def test_bounding_box_contains_every_point_inside_radius(origin):
    radius = 50_000
    box = geo.bounding_box(origin, radius)
    for bearing in range(0, 360, 15):
        inside = destination(origin, bearing, radius * 0.999)
        assert geo.distance_meters(origin, inside) <= radius
        assert geo.within_bounding_box(inside, box), bearing


def test_bounding_box_near_pole_spans_all_longitudes():
    box = geo.bounding_box(GeoPoint(latitude=89.9, longitude=0.0), 50_000)
    assert box[1] == -180.0 and box[3] == 180.0


def test_zero_radius_box_contains_origin():
    assert geo.within_bounding_box(INDORE, geo.bounding_box(INDORE, 0))


@pytest.mark.parametrize("meters, text", [(0, "0 m"), (850.4, "850 m"), (1000, "1.0 km"), (2400, "2.4 km"), (40000, "40.0 km")])
def test_format_distance(meters, text):
    assert geo.format_distance(meters) == text
