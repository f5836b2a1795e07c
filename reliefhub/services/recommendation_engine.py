"""
Recommendation Engine - deterministic, explainable action ranking.

DESIGN PRINCIPLES (CRITICAL):
- Scoring is a fixed weighted formula, NOT a trained model
- Every recommendation carries a plain-language reason in its metadata
- Feedback only nudges per-user category weights; it never leaks across users
- A dismissed recommendation id never comes back in the same session

SCORING:
    confidence = clamp01(roleMatch * 0.35
                         + distanceDecay * 0.30
                         + categoryWeight * 0.20
                         + recency * 0.15)

PRIORITY:
    emergency candidate and confidence >= 0.85 -> critical
    confidence >= 0.75 -> high
    confidence >= 0.50 -> medium
    otherwise          -> low

CONCURRENCY:
- generate() only suspends while waiting for the location source
- Overlapping generate() calls for one user share a single in-flight run
- A cancelled run commits nothing
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union
import asyncio
import hashlib
import logging

from reliefhub.core.errors import InvalidCoordinateError, LocationError
from reliefhub.core.settings import Settings, settings as default_settings
from reliefhub.models.base import GeoPoint
from reliefhub.models.recommendation import (
    ActionType,
    Priority,
    Recommendation,
    RecommendationAction,
    RecommendationSource,
)
from reliefhub.models.relief_point import ReliefCategory, ReliefPoint
from reliefhub.models.user import User, UserRole
from reliefhub.services.collaborators import (
    LocationErrorKind,
    LocationResult,
    LocationSource,
    SessionContext,
)
from reliefhub.services.events import ChangeEvent
from reliefhub.services.relief_point_store import ReliefPointStore
from reliefhub.utils import geo

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def synthetic_recommendation_id(role: Union[UserRole, str], kind: str) -> str:
    """
    Stable id for a suggestion that is not backed by a relief point.

    Derived from role + suggestion kind only, so the same suggestion keeps
    its id across runs even when its title changes (e.g. "3 nearby needs").
    """
    role_value = role.value if isinstance(role, UserRole) else str(role)
    digest = hashlib.sha1(f"{role_value}:{kind}".encode("utf-8")).hexdigest()
    return f"syn-{digest[:12]}"


def relief_recommendation_id(point_id: str) -> str:
    return f"relief-{point_id}"


@dataclass
class _Candidate:
    """A scorable opportunity, before confidence and priority are assigned."""
    rec_id: str
    title: str
    description: str
    icon: str
    feedback_key: str
    source: RecommendationSource
    role_match: float
    distance_meters: float
    recency: float
    emergency: bool = False
    actions: List[RecommendationAction] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)


class RecommendationEngine:
    """
    Turns {user, nearby relief points, feedback weights} into a ranked list.

    One instance serves every user; all learned and session state is keyed
    by user id.
    """

    # Formula weights
    WEIGHT_ROLE_MATCH = 0.35
    WEIGHT_DISTANCE = 0.30
    WEIGHT_CATEGORY = 0.20
    WEIGHT_RECENCY = 0.15

    # Priority thresholds
    CRITICAL_THRESHOLD = 0.85
    HIGH_THRESHOLD = 0.75
    MEDIUM_THRESHOLD = 0.50

    DEFAULT_CATEGORY_WEIGHT = 1.0

    # Category relevance per role: strong -> 1.0, weak -> 0.5, otherwise 0
    ROLE_RELEVANCE = {
        UserRole.VICTIM: {
            "strong": {ReliefCategory.FOOD.value, ReliefCategory.MEDICAL.value, ReliefCategory.SHELTER.value},
            "weak": {ReliefCategory.SUPPLIES.value},
        },
        UserRole.VOLUNTEER: {
            "strong": {ReliefCategory.SUPPLIES.value, ReliefCategory.FOOD.value},
            "weak": {ReliefCategory.SHELTER.value, ReliefCategory.MEDICAL.value},
        },
        UserRole.NGO: {
            "strong": {ReliefCategory.SUPPLIES.value, ReliefCategory.SHELTER.value},
            "weak": {ReliefCategory.FOOD.value},
        },
    }

    # Feedback keys carried by synthetic suggestions
    SYNTHETIC_FEEDBACK_KEYS = {"sos", "find_help", "volunteer", "coverage"}

    CATEGORY_ICONS = {
        ReliefCategory.FOOD: "🍕",
        ReliefCategory.MEDICAL: "🏥",
        ReliefCategory.SHELTER: "🏠",
        ReliefCategory.SUPPLIES: "📦",
    }

    def __init__(
        self,
        relief_points: ReliefPointStore,
        location_source: Optional[LocationSource] = None,
        session: Optional[SessionContext] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._relief_points = relief_points
        self._location_source = location_source
        self._session = session
        self.settings = settings or default_settings
        self._clock = clock

        self._weights: Dict[str, Dict[str, float]] = {}
        self._dismissed: Dict[str, Set[str]] = {}
        self._active: Dict[str, List[Recommendation]] = {}
        self._last_known: Dict[str, GeoPoint] = {}
        self._in_flight: Dict[str, asyncio.Future] = {}
        self._waiters: Dict[asyncio.Future, int] = {}

        self._unsubscribe = relief_points.subscribe(self._on_relief_point_change)

    def close(self) -> None:
        """Stop listening to the relief point store."""
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate(self, user: Optional[User] = None) -> List[Recommendation]:
        """
        (Re)generate recommendations for a user.

        Falls back to the session's current user when user is None; with
        no user at all an empty list is returned.

        Overlapping calls for the same user join the in-flight run and
        receive its result. Cancelling one caller only cancels the run when
        nobody else is waiting on it.

        Returns:
            Ranked recommendations (also committed as the user's active set)

        Raises:
            LocationError: the location source failed and no fallback
                position (cached or profile) exists
        """
        user = self._resolve_user(user)
        if user is None:
            logger.info("No current user, returning no recommendations")
            return []

        task = self._in_flight.get(user.id)
        if task is None or task.done():
            task = asyncio.ensure_future(self._run(user))
            self._in_flight[user.id] = task
            task.add_done_callback(partial(self._clear_in_flight, user.id))
        else:
            logger.info(f"Joining in-flight recommendation run for user {user.id}")

        self._waiters[task] = self._waiters.get(task, 0) + 1
        try:
            result = await asyncio.shield(task)
            return list(result)
        except asyncio.CancelledError:
            if self._waiters.get(task, 0) <= 1 and not task.done():
                logger.info(f"Recommendation run for user {user.id} cancelled")
                if self._in_flight.get(user.id) is task:
                    del self._in_flight[user.id]
                task.cancel()
            raise
        finally:
            remaining = self._waiters.get(task, 1) - 1
            if remaining > 0:
                self._waiters[task] = remaining
            else:
                self._waiters.pop(task, None)

    async def refresh(self, user: Optional[User] = None) -> List[Recommendation]:
        """Regenerate for a pull-to-refresh. Dismissals stay in force."""
        return await self.generate(user)

    def is_generating(self, user_id: str) -> bool:
        task = self._in_flight.get(user_id)
        return task is not None and not task.done()

    def _clear_in_flight(self, user_id: str, task: asyncio.Future) -> None:
        if self._in_flight.get(user_id) is task:
            del self._in_flight[user_id]

    async def _run(self, user: User) -> List[Recommendation]:
        origin, degraded = await self._resolve_location(user)
        # Everything below is synchronous: the store reads form one snapshot
        # and the commit is all-or-nothing.
        return self._build_and_commit(user, origin, degraded)

    async def _resolve_location(self, user: User) -> Tuple[Optional[GeoPoint], bool]:
        """
        Returns (origin, degraded). degraded is True when a fresh fix was
        requested but a cached or profile location had to be used instead.
        """
        fallback = self._fallback_location(user)

        if self._location_source is None:
            return fallback, False

        try:
            result = await asyncio.wait_for(
                self._location_source.get_current_position(),
                timeout=self.settings.LOCATION_TIMEOUT_SECONDS,
            )
            if not isinstance(result, LocationResult):
                logger.warning(f"Location source returned {type(result).__name__} for user {user.id}, expected LocationResult")
                result = LocationResult.failed(LocationErrorKind.SERVICE_DISABLED, "Malformed location result")
        except asyncio.TimeoutError:
            result = LocationResult.failed(LocationErrorKind.TIMEOUT)
        except LocationError as e:
            try:
                kind = LocationErrorKind(e.kind)
            except ValueError:
                kind = LocationErrorKind.SERVICE_DISABLED
            result = LocationResult.failed(kind, str(e) or None)
        except Exception as e:
            logger.warning(f"Location source failed for user {user.id}: {e}")
            result = LocationResult.failed(LocationErrorKind.SERVICE_DISABLED, str(e))

        if result.is_ok:
            try:
                geo.validate_point(result.position)
            except InvalidCoordinateError as e:
                logger.warning(f"Location source returned an invalid position for user {user.id}: {e}")
                result = LocationResult.failed(LocationErrorKind.SERVICE_DISABLED, str(e))
            else:
                self._last_known[user.id] = result.position
                return result.position, False

        if fallback is not None:
            logger.warning(
                f"Location unavailable for user {user.id} ({result.error.value}), "
                f"reusing last known position"
            )
            return fallback, True

        logger.warning(f"Location unavailable for user {user.id} ({result.error.value}) and no fallback")
        raise result.to_exception()

    def _fallback_location(self, user: User) -> Optional[GeoPoint]:
        """Cached fix, else the profile location. Out-of-range positions are skipped."""
        for candidate in (self._last_known.get(user.id), user.location):
            if candidate is None:
                continue
            try:
                geo.validate_point(candidate)
            except InvalidCoordinateError as e:
                logger.warning(f"Ignoring invalid stored location for user {user.id}: {e}")
                continue
            return candidate
        return None

    def _build_and_commit(self, user: User, origin: Optional[GeoPoint], degraded: bool) -> List[Recommendation]:
        now = self._clock()
        common_metadata: Dict[str, str] = {}
        if degraded:
            common_metadata["degradedAccuracy"] = "true"

        nearby: List[Tuple[ReliefPoint, float]] = []
        radius = self.settings.DEFAULT_RADIUS_METERS
        if origin is not None:
            nearby, radius = self._nearby_with_expansion(origin)
            common_metadata["searchRadius"] = geo.format_distance(radius)
        else:
            common_metadata["locationUnavailable"] = "true"

        candidates = [self._relief_candidate(user, point, distance, now) for point, distance in nearby]
        candidates.extend(self._synthetic_candidates(user, len(nearby), radius, origin))

        dismissed = self._dismissed.get(user.id, set())
        weights = self._weights.get(user.id, {})

        ranked = []
        for order, candidate in enumerate(candidates):
            if candidate.rec_id in dismissed:
                continue
            ranked.append((order, self._to_recommendation(candidate, weights, common_metadata)))

        ranked.sort(key=lambda pair: (-pair[1].priority.rank, -pair[1].confidence, pair[0]))
        result = [rec for _, rec in ranked][: self.settings.MAX_RECOMMENDATIONS]

        self._active[user.id] = result
        logger.info(
            f"Generated {len(result)} recommendations for user {user.id} "
            f"({len(nearby)} relief points, {len(dismissed)} dismissed)"
        )
        return list(result)

    def _nearby_with_expansion(self, origin: GeoPoint) -> Tuple[List[Tuple[ReliefPoint, float]], float]:
        """
        nearby() at the default radius, doubling up to the hard cap while
        nothing is found.
        """
        radius = self.settings.DEFAULT_RADIUS_METERS
        cap = self.settings.MAX_SEARCH_RADIUS_METERS
        nearby = self._relief_points.nearby_with_distance(origin, radius)

        while not nearby and 0 < radius < cap:
            radius = min(radius * 2, cap)
            logger.info(f"No relief points in range, expanding search radius to {radius:.0f} m")
            nearby = self._relief_points.nearby_with_distance(origin, radius)

        if not nearby:
            logger.info(f"No relief points within {cap:.0f} m, synthetic suggestions only")
        return nearby, radius

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    @classmethod
    def score(cls, role_match: float, distance_decay: float, category_weight: float, recency: float) -> float:
        raw = (
            role_match * cls.WEIGHT_ROLE_MATCH
            + distance_decay * cls.WEIGHT_DISTANCE
            + category_weight * cls.WEIGHT_CATEGORY
            + recency * cls.WEIGHT_RECENCY
        )
        return clamp01(round(raw, 6))

    @classmethod
    def priority_for(cls, confidence: float, emergency: bool = False) -> Priority:
        if emergency and confidence >= cls.CRITICAL_THRESHOLD:
            return Priority.CRITICAL
        if confidence >= cls.HIGH_THRESHOLD:
            return Priority.HIGH
        if confidence >= cls.MEDIUM_THRESHOLD:
            return Priority.MEDIUM
        return Priority.LOW

    def role_match(self, user: User, category: str) -> float:
        tags = {tag.strip().casefold() for tag in user.tags}
        if category in tags:
            return 1.0
        relevance = self.ROLE_RELEVANCE.get(user.role, {"strong": set(), "weak": set()})
        if category in relevance["strong"]:
            return 1.0
        if category in relevance["weak"]:
            return 0.5
        return 0.0

    def distance_decay(self, distance_meters: float) -> float:
        max_distance = self.settings.MAX_RELEVANT_DISTANCE_METERS
        if max_distance <= 0:
            return 0.0
        return max(0.0, 1.0 - distance_meters / max_distance)

    def recency(self, updated_at: datetime, now: Optional[datetime] = None) -> float:
        window = self.settings.RECENCY_WINDOW_HOURS
        if window <= 0:
            return 0.0
        now = now or self._clock()
        if updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=timezone.utc)
        age_hours = (now - updated_at).total_seconds() / 3600
        return clamp01(1.0 - age_hours / window)

    def _to_recommendation(
        self,
        candidate: _Candidate,
        weights: Dict[str, float],
        common_metadata: Dict[str, str],
    ) -> Recommendation:
        category_weight = weights.get(candidate.feedback_key, self.DEFAULT_CATEGORY_WEIGHT)
        decay = self.distance_decay(candidate.distance_meters)
        confidence = self.score(candidate.role_match, decay, category_weight, candidate.recency)
        priority = self.priority_for(confidence, candidate.emergency)

        reasons = [
            f"Role match: {candidate.role_match:g}",
            f"Distance: {geo.format_distance(candidate.distance_meters)}",
            f"Category weight: {category_weight:.2f}",
            f"Recency: {candidate.recency:.2f}",
        ]

        metadata = dict(candidate.metadata)
        metadata.update(common_metadata)
        metadata["reason"] = " | ".join(reasons)

        return Recommendation(
            id=candidate.rec_id,
            title=candidate.title,
            description=candidate.description,
            priority=priority,
            confidence=confidence,
            icon=candidate.icon,
            category=candidate.feedback_key,
            source=candidate.source,
            actions=list(candidate.actions),
            metadata=metadata,
        )

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def _relief_candidate(self, user: User, point: ReliefPoint, distance: float, now: datetime) -> _Candidate:
        category = point.category.value
        rec_id = relief_recommendation_id(point.id)
        location_text = point.location_label or f"{point.location.latitude:.4f}, {point.location.longitude:.4f}"
        coords = {
            "pointId": point.id,
            "latitude": f"{point.location.latitude:.6f}",
            "longitude": f"{point.location.longitude:.6f}",
        }

        actions = [
            RecommendationAction(
                id=f"{rec_id}-navigate",
                label="Get Directions",
                type=ActionType.NAVIGATE,
                data=dict(coords, screen="map"),
            )
        ]
        if point.contact_phone:
            actions.append(
                RecommendationAction(
                    id=f"{rec_id}-call",
                    label="Call",
                    type=ActionType.CALL,
                    data={"phone": point.contact_phone, "pointId": point.id},
                )
            )
        if user.role in (UserRole.VOLUNTEER, UserRole.NGO):
            actions.append(
                RecommendationAction(
                    id=f"{rec_id}-volunteer",
                    label="Volunteer Here",
                    type=ActionType.VOLUNTEER,
                    data={"pointId": point.id},
                )
            )
        actions.append(
            RecommendationAction(
                id=f"{rec_id}-view",
                label="View Details",
                type=ActionType.VIEW,
                data={"pointId": point.id},
            )
        )

        metadata = {
            "pointId": point.id,
            "category": category,
            "distance": geo.format_distance(distance),
            "distanceMeters": f"{distance:.0f}",
            "location": location_text,
        }
        if point.open_hours:
            metadata["openHours"] = point.open_hours
        if point.capacity is not None:
            metadata["capacity"] = str(point.capacity)

        return _Candidate(
            rec_id=rec_id,
            title=point.title,
            description=point.description or f"{category.capitalize()} relief point",
            icon=self.CATEGORY_ICONS.get(point.category, "📍"),
            feedback_key=category,
            source=RecommendationSource.RELIEF_POINT,
            role_match=self.role_match(user, category),
            distance_meters=distance,
            recency=self.recency(point.updated_at, now),
            actions=actions,
            metadata=metadata,
        )

    def _synthetic_candidates(
        self,
        user: User,
        nearby_count: int,
        radius: float,
        origin: Optional[GeoPoint],
    ) -> List[_Candidate]:
        """Role-specific suggestions that are always available."""
        radius_text = geo.format_distance(radius)
        candidates = []

        def synthetic(kind: str, title: str, description: str, icon: str, feedback_key: str,
                      actions: List[RecommendationAction], emergency: bool = False) -> _Candidate:
            return _Candidate(
                rec_id=synthetic_recommendation_id(user.role, kind),
                title=title,
                description=description,
                icon=icon,
                feedback_key=feedback_key,
                source=RecommendationSource.SYNTHETIC,
                role_match=1.0,
                distance_meters=0.0,
                recency=1.0,
                emergency=emergency,
                actions=actions,
                metadata={"kind": kind, "nearbyCount": str(nearby_count)},
            )

        if user.role == UserRole.VICTIM:
            sos_id = synthetic_recommendation_id(user.role, "sos")
            sos_data = {"phone": self.settings.EMERGENCY_PHONE}
            if origin is not None:
                sos_data.update(latitude=f"{origin.latitude:.6f}", longitude=f"{origin.longitude:.6f}")
            candidates.append(synthetic(
                "sos",
                "Send SOS Alert",
                "Immediately alert local emergency services, nearby volunteers and relief organizations.",
                "🆘",
                "sos",
                [
                    RecommendationAction(id=f"{sos_id}-sos", label="Send SOS Alert", type=ActionType.SOS, data=sos_data),
                    RecommendationAction(
                        id=f"{sos_id}-call",
                        label=f"Call {self.settings.EMERGENCY_PHONE}",
                        type=ActionType.CALL,
                        data={"phone": self.settings.EMERGENCY_PHONE},
                    ),
                ],
                emergency=True,
            ))

            find_id = synthetic_recommendation_id(user.role, "find_help")
            if nearby_count:
                description = f"{nearby_count} relief point(s) within {radius_text} can help right now."
            else:
                description = "No relief points nearby yet. Connect with aid organizations for support."
            candidates.append(synthetic(
                "find_help",
                "Connect with aid",
                description,
                "👥",
                "find_help",
                [RecommendationAction(id=f"{find_id}-navigate", label="Find Help", type=ActionType.NAVIGATE,
                                      data={"screen": "map"})],
            ))

        elif user.role == UserRole.VOLUNTEER:
            needs_id = synthetic_recommendation_id(user.role, "nearby_needs")
            title = f"{nearby_count} nearby needs" if nearby_count else "No nearby needs right now"
            candidates.append(synthetic(
                "nearby_needs",
                title,
                f"Relief points within {radius_text} that could use a hand.",
                "🤝",
                "volunteer",
                [
                    RecommendationAction(id=f"{needs_id}-volunteer", label="Volunteer", type=ActionType.VOLUNTEER,
                                         data={"radius": f"{radius:.0f}"}),
                    RecommendationAction(id=f"{needs_id}-navigate", label="Open Map", type=ActionType.NAVIGATE,
                                         data={"screen": "map"}),
                ],
            ))

        elif user.role == UserRole.NGO:
            coverage_id = synthetic_recommendation_id(user.role, "coverage")
            candidates.append(synthetic(
                "coverage",
                "Coordinate relief coverage",
                f"{nearby_count} relief point(s) active within {radius_text}. Review gaps by category.",
                "🗺️",
                "coverage",
                [RecommendationAction(id=f"{coverage_id}-view", label="View Coverage", type=ActionType.VIEW,
                                      data={"screen": "insights"})],
            ))

        return candidates

    # ------------------------------------------------------------------
    # Feedback & dismissal
    # ------------------------------------------------------------------

    def provide_feedback(
        self,
        category_or_tag: Union[ReliefCategory, str],
        positive: bool,
        user_id: Optional[str] = None,
    ) -> Optional[float]:
        """
        Nudge the user's weight for a category/tag by one FEEDBACK_STEP.

        A recommendation id from the user's active list is accepted too and
        resolves to that recommendation's category.
        Keys that match no category or suggestion tag (e.g. "general") are
        stored but do not change any score.

        Returns:
            The new weight, or None when there is no user to attribute it to
        """
        uid = self._resolve_user_id(user_id)
        if uid is None:
            logger.warning("Feedback received without a user, ignoring")
            return None

        key = self._feedback_key(uid, category_or_tag)
        if not self.is_scored_feedback_key(key):
            logger.debug(f"Feedback key '{key}' matches no category or suggestion; stored but does not affect scores")
        weights = self._weights.setdefault(uid, {})
        current = weights.get(key, self.DEFAULT_CATEGORY_WEIGHT)

        step = self.settings.FEEDBACK_STEP if positive else -self.settings.FEEDBACK_STEP
        updated = round(current + step, 6)
        updated = max(self.settings.FEEDBACK_WEIGHT_MIN, min(self.settings.FEEDBACK_WEIGHT_MAX, updated))
        weights[key] = updated

        logger.info(f"Feedback {'+' if positive else '-'} for '{key}' from user {uid}: {current:.2f} -> {updated:.2f}")
        return updated

    @classmethod
    def is_scored_feedback_key(cls, key: str) -> bool:
        """True when a weight under this key feeds into some candidate's score."""
        return key in {c.value for c in ReliefCategory} or key in cls.SYNTHETIC_FEEDBACK_KEYS

    def feedback_weights(self, user_id: str) -> Dict[str, float]:
        return dict(self._weights.get(user_id, {}))

    def _feedback_key(self, user_id: str, category_or_tag: Union[ReliefCategory, str]) -> str:
        if isinstance(category_or_tag, ReliefCategory):
            return category_or_tag.value
        value = str(category_or_tag).strip()
        for rec in self._active.get(user_id, []):
            if rec.id == value:
                return rec.category
        return value.casefold()

    def dismiss_recommendation(self, recommendation_id: str, user_id: Optional[str] = None) -> bool:
        """
        Suppress a recommendation id for the rest of the user's session.

        Returns:
            False only when there is no user to attribute the dismissal to
        """
        uid = self._resolve_user_id(user_id)
        if uid is None:
            logger.warning(f"Dismissal of {recommendation_id} without a user, ignoring")
            return False

        self._dismissed.setdefault(uid, set()).add(recommendation_id)
        active = self._active.get(uid)
        if active:
            self._active[uid] = [rec for rec in active if rec.id != recommendation_id]

        logger.info(f"User {uid} dismissed recommendation {recommendation_id}")
        return True

    def dismissed_ids(self, user_id: str) -> Set[str]:
        return set(self._dismissed.get(user_id, set()))

    def reset_session(self, user_id: str) -> None:
        """
        Forget session state (dismissals, active list, cached location) on
        sign-out. Feedback weights live for the engine's lifetime.
        """
        self._dismissed.pop(user_id, None)
        self._active.pop(user_id, None)
        self._last_known.pop(user_id, None)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def recommendations(self, user_id: str) -> List[Recommendation]:
        """The user's committed active list from the last completed run."""
        return list(self._active.get(user_id, []))

    def insights(self, user: Optional[User] = None) -> Dict[str, Any]:
        """
        Per-category resource availability around the user.

        For each category: points within the default radius, how many still
        have capacity, their ratio, and the nearest one's distance. coverage
        is "good" when every category has capacity in range, "partial" when
        some do, and "none" otherwise.
        """
        user = self._resolve_user(user)
        if user is None:
            return {}

        origin = self._fallback_location(user)
        if origin is None:
            return {"locationUnavailable": True}

        radius = self.settings.DEFAULT_RADIUS_METERS
        nearby = self._relief_points.nearby_with_distance(origin, radius)

        availability: Dict[str, Dict[str, Any]] = {}
        for category in ReliefCategory:
            in_category = [(p, d) for p, d in nearby if p.category == category]
            available = [p for p, _ in in_category if p.has_capacity]
            availability[category.value] = {
                "total": len(in_category),
                "available": len(available),
                "ratio": round(len(available) / len(in_category), 2) if in_category else 0.0,
                "nearest": geo.format_distance(in_category[0][1]) if in_category else None,
            }

        covered = sum(1 for stats in availability.values() if stats["available"] > 0)
        if covered == len(availability):
            coverage = "good"
        elif covered:
            coverage = "partial"
        else:
            coverage = "none"

        return {
            "radius": geo.format_distance(radius),
            "resourceAvailability": availability,
            "coverage": coverage,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_user(self, user: Optional[User]) -> Optional[User]:
        if user is not None:
            return user
        if self._session is not None:
            return self._session.current_user
        return None

    def _resolve_user_id(self, user_id: Optional[str]) -> Optional[str]:
        if user_id:
            return user_id
        user = self._resolve_user(None)
        return user.id if user else None

    def _on_relief_point_change(self, event: ChangeEvent) -> None:
        # Removed points must not linger in anyone's active list
        if event.kind != "removed":
            return
        rec_id = relief_recommendation_id(event.entity_id)
        for uid, active in self._active.items():
            if any(rec.id == rec_id for rec in active):
                self._active[uid] = [rec for rec in active if rec.id != rec_id]
                logger.info(f"Dropped recommendation {rec_id} for user {uid}: relief point removed")
