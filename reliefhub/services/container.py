"""
Service container - explicit store instances built once at startup.

Replaces per-module singletons: the container owns one instance of each
store and the engine, wires the cross-store subscriptions, and is passed by
reference to consumers (FastAPI keeps it on app.state).
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import json
import logging
import os

from reliefhub.core.settings import Settings, settings as default_settings
from reliefhub.models.relief_point import ReliefPoint, ReliefPointCreate
from reliefhub.services.collaborators import (
    AlertDispatcher,
    InMemorySessionContext,
    LocationSource,
    LoggingAlertDispatcher,
)
from reliefhub.services.events import ChangeEvent
from reliefhub.services.notification_store import NotificationStore
from reliefhub.services.recommendation_engine import RecommendationEngine
from reliefhub.services.relief_point_store import ReliefPointStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    session: InMemorySessionContext
    dispatcher: AlertDispatcher
    relief_points: ReliefPointStore
    notifications: NotificationStore
    recommendations: RecommendationEngine
    _unsubscribers: List[Callable[[], None]]

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        self.recommendations.close()


def _announce_new_relief_point(notifications: NotificationStore) -> Callable[[ChangeEvent], None]:
    def on_change(event: ChangeEvent) -> None:
        if event.kind != "added":
            return
        point: ReliefPoint = event.payload
        where = f" at {point.location_label}" if point.location_label else ""
        notifications.push_relief_update(
            title=f"New relief point: {point.title}",
            body=f"{point.category.value.capitalize()} available{where}.",
        )

    return on_change


def build_container(
    settings: Optional[Settings] = None,
    location_source: Optional[LocationSource] = None,
    dispatcher: Optional[AlertDispatcher] = None,
    session: Optional[InMemorySessionContext] = None,
) -> ServiceContainer:
    """
    Construct and wire every core component.

    Args:
        settings: Settings instance (defaults to the process settings)
        location_source: Optional device location collaborator
        dispatcher: Alert transport (defaults to the logging simulator)
        session: Session collaborator (defaults to an in-memory one)
    """
    settings = settings or default_settings
    session = session or InMemorySessionContext()
    dispatcher = dispatcher or LoggingAlertDispatcher()

    relief_points = ReliefPointStore()
    notifications = NotificationStore(dispatcher=dispatcher)
    recommendations = RecommendationEngine(
        relief_points,
        location_source=location_source,
        session=session,
        settings=settings,
    )

    unsubscribers = []
    if settings.NOTIFY_ON_NEW_RELIEF_POINTS:
        unsubscribers.append(relief_points.subscribe(_announce_new_relief_point(notifications)))

    container = ServiceContainer(
        settings=settings,
        session=session,
        dispatcher=dispatcher,
        relief_points=relief_points,
        notifications=notifications,
        recommendations=recommendations,
        _unsubscribers=unsubscribers,
    )

    if settings.SEED_DEMO_DATA:
        load_seed_file(container, settings.SEED_FILE_PATH)

    logger.info("Service container initialized")
    return container


def load_seed_file(container: ServiceContainer, path: str) -> int:
    """
    Load relief points from a seed JSON file ({"relief_points": [...]}).
    Returns how many were added; a missing file adds nothing.
    """
    if not os.path.exists(path):
        logger.warning(f"Seed file not found: {path}")
        return 0

    with open(path, "r", encoding="utf-8") as f:
        seed = json.load(f)

    added = 0
    for raw in seed.get("relief_points", []):
        container.relief_points.add(ReliefPointCreate(**raw))
        added += 1

    logger.info(f"Seeded {added} relief points from {path}")
    return added
