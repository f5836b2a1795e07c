"""
Relief Point Store - catalog of geolocated aid resources.

DESIGN PRINCIPLES:
- The store owns its catalog; callers only ever see frozen ReliefPoint models
- Ids are unique and never reused, even after removal
- Every mutation publishes a ChangeEvent after it has been committed
- Unknown ids raise NotFoundError, bad coordinates InvalidCoordinateError
"""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Set, Tuple, Union
import logging
import uuid

from reliefhub.core.errors import DuplicateIdError, NotFoundError
from reliefhub.models.base import GeoPoint
from reliefhub.models.relief_point import (
    ReliefCategory,
    ReliefPoint,
    ReliefPointCreate,
    ReliefPointUpdate,
)
from reliefhub.services.events import ChangeFeed, Subscriber
from reliefhub.utils import geo

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReliefPointStore:
    """
    In-memory relief point catalog.

    Insertion order is preserved; filter_by_category and search return
    points in that order, nearby returns them by ascending distance.
    """

    EVENT_SOURCE = "relief_points"

    def __init__(self, clock: Callable[[], datetime] = _utcnow):
        self._points: Dict[str, ReliefPoint] = {}
        self._retired_ids: Set[str] = set()
        self._clock = clock
        self.changes = ChangeFeed(self.EVENT_SOURCE)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, point: Union[ReliefPointCreate, ReliefPoint, dict]) -> ReliefPoint:
        """
        Add a relief point to the catalog.

        Args:
            point: ReliefPointCreate payload (a full ReliefPoint or a plain
                dict are accepted too). A missing id is generated.

        Returns:
            The stored ReliefPoint

        Raises:
            DuplicateIdError: id is present or was used by a removed point
            InvalidCoordinateError: location is out of range
        """
        if isinstance(point, dict):
            point = ReliefPointCreate(**point)

        geo.validate_point(point.location)

        point_id = point.id or uuid.uuid4().hex
        if point_id in self._points or point_id in self._retired_ids:
            raise DuplicateIdError("ReliefPoint", point_id)

        now = self._clock()
        data = point.model_dump(exclude={"id", "created_at", "updated_at"})
        stored = ReliefPoint(id=point_id, created_at=now, updated_at=now, **data)

        self._points[point_id] = stored
        logger.info(f"Added relief point {point_id} ({stored.category.value}): {stored.title}")

        self.changes.publish("added", point_id, stored)
        return stored

    def update(self, point_id: str, patch: Union[ReliefPointUpdate, dict]) -> ReliefPoint:
        """
        Apply a partial update. Only fields explicitly set on the patch change.

        Raises:
            NotFoundError: unknown id
            InvalidCoordinateError: patched location is out of range
        """
        current = self._points.get(point_id)
        if current is None:
            raise NotFoundError("ReliefPoint", point_id)

        if isinstance(patch, dict):
            patch = ReliefPointUpdate(**patch)

        changes = patch.model_dump(exclude_unset=True)
        if changes.get("location") is not None:
            geo.validate_point(patch.location)
            changes["location"] = patch.location

        # Fields declared non-optional on ReliefPoint cannot be cleared
        for required in ("title", "category", "location"):
            if required in changes and changes[required] is None:
                del changes[required]
        if "description" in changes and changes["description"] is None:
            changes["description"] = ""

        changes["updated_at"] = self._clock()
        updated = current.model_copy(update=changes)

        self._points[point_id] = updated
        logger.info(f"Updated relief point {point_id}: {sorted(k for k in changes if k != 'updated_at')}")

        self.changes.publish("updated", point_id, updated, previous=current)
        return updated

    def remove(self, point_id: str) -> ReliefPoint:
        """
        Remove a relief point. Its id is retired and can never be re-added.

        Raises:
            NotFoundError: unknown id
        """
        removed = self._points.pop(point_id, None)
        if removed is None:
            raise NotFoundError("ReliefPoint", point_id)

        self._retired_ids.add(point_id)
        logger.info(f"Removed relief point {point_id}")

        self.changes.publish("removed", point_id, removed)
        return removed

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self.changes.subscribe(callback)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, point_id: str) -> ReliefPoint:
        point = self._points.get(point_id)
        if point is None:
            raise NotFoundError("ReliefPoint", point_id)
        return point

    def all(self) -> List[ReliefPoint]:
        return list(self._points.values())

    def filter_by_category(self, category: Optional[Union[ReliefCategory, str]] = None) -> List[ReliefPoint]:
        """
        Return all points when category is None, otherwise exact matches.
        An unrecognized category string matches nothing.
        """
        if category is None:
            return self.all()
        value = category.value if isinstance(category, ReliefCategory) else str(category)
        return [p for p in self._points.values() if p.category.value == value]

    def search(self, query: Optional[str], category: Optional[Union[ReliefCategory, str]] = None) -> List[ReliefPoint]:
        """
        Case-insensitive substring search over title, description and
        location label. A blank query returns the (category-filtered) set.
        """
        candidates = self.filter_by_category(category)
        needle = (query or "").strip().casefold()
        if not needle:
            return candidates

        results = []
        for point in candidates:
            haystacks = (point.title, point.description, point.location_label or "")
            if any(needle in text.casefold() for text in haystacks):
                results.append(point)
        return results

    def nearby_with_distance(
        self,
        origin: GeoPoint,
        radius_meters: float,
        category: Optional[Union[ReliefCategory, str]] = None,
    ) -> List[Tuple[ReliefPoint, float]]:
        """
        Points within radius_meters of origin, paired with their distance,
        ordered by ascending distance (insertion order breaks ties).

        Raises:
            InvalidCoordinateError: origin is out of range
        """
        geo.validate_point(origin)
        box = geo.bounding_box(origin, radius_meters)

        matches = []
        for point in self.filter_by_category(category):
            if not geo.within_bounding_box(point.location, box):
                continue
            distance = geo.distance_meters(origin, point.location)
            if distance <= radius_meters:
                matches.append((point, distance))

        matches.sort(key=lambda pair: pair[1])
        return matches

    def nearby(
        self,
        origin: GeoPoint,
        radius_meters: float,
        category: Optional[Union[ReliefCategory, str]] = None,
    ) -> List[ReliefPoint]:
        """Points within radius_meters of origin, nearest first."""
        return [point for point, _ in self.nearby_with_distance(origin, radius_meters, category)]

    def __len__(self) -> int:
        return len(self._points)

    def __contains__(self, point_id: object) -> bool:
        return point_id in self._points
