from datetime import datetime, timezone

import pytest

from reliefhub.core.settings import Settings
from reliefhub.models.base import GeoPoint
from reliefhub.models.relief_point import ReliefPointCreate
from reliefhub.models.user import User, UserRole
from reliefhub.services.notification_store import NotificationStore
from reliefhub.services.recommendation_engine import RecommendationEngine
from reliefhub.services.relief_point_store import ReliefPointStore

NOW = datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)

# Rajwada, Indore
INDORE = GeoPoint(latitude=22.7196, longitude=75.8577)

# Meters per degree of latitude on a 6,371 km sphere
METERS_PER_DEGREE_LAT = 111194.9266


def offset_north(origin: GeoPoint, meters: float) -> GeoPoint:
    return GeoPoint(latitude=origin.latitude + meters / METERS_PER_DEGREE_LAT, longitude=origin.longitude)


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_point(title="Community Kitchen", category="food", location=INDORE, **kwargs) -> ReliefPointCreate:
    return ReliefPointCreate(title=title, category=category, location=location, **kwargs)


def make_user(user_id="u-victim", role=UserRole.VICTIM, location=INDORE, tags=()) -> User:
    return User(
        id=user_id,
        display_name=user_id,
        email=f"{user_id}@example.com",
        role=role,
        location=location,
        tags=set(tags),
    )


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return ReliefPointStore(clock=clock)


@pytest.fixture
def notifications(clock):
    return NotificationStore(clock=clock)


@pytest.fixture
def engine(store, settings, clock):
    return RecommendationEngine(store, settings=settings, clock=clock)


@pytest.fixture
def victim():
    return make_user()


@pytest.fixture
def volunteer():
    return make_user("u-volunteer", role=UserRole.VOLUNTEER)
