"""
External collaborator interfaces consumed by the core.

The core never talks to a platform SDK directly. Location, session and
alert delivery are injected behind these interfaces; the in-process
implementations below are used for local runs and tests.

Contract (all collaborators):
- Capability calls return a result-or-error value instead of raising
- The core treats an unexpected exception from a collaborator the same
  way as an error result
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple
import logging

from reliefhub.core.errors import (
    LocationError,
    LocationTimeoutError,
    PermissionDeniedError,
    PermissionDeniedPermanentlyError,
    ServiceDisabledError,
)
from reliefhub.models.base import GeoPoint
from reliefhub.models.notification import Notification
from reliefhub.models.user import User

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Location
# ----------------------------------------------------------------------

class LocationErrorKind(str, Enum):
    SERVICE_DISABLED = "service_disabled"
    PERMISSION_DENIED = "permission_denied"
    PERMISSION_DENIED_PERMANENTLY = "permission_denied_permanently"
    TIMEOUT = "timeout"


_LOCATION_ERRORS = {
    LocationErrorKind.SERVICE_DISABLED: (ServiceDisabledError, "Location services are disabled"),
    LocationErrorKind.PERMISSION_DENIED: (PermissionDeniedError, "Location permissions are denied"),
    LocationErrorKind.PERMISSION_DENIED_PERMANENTLY: (
        PermissionDeniedPermanentlyError,
        "Location permissions are permanently denied",
    ),
    LocationErrorKind.TIMEOUT: (LocationTimeoutError, "Timed out waiting for a location fix"),
}


@dataclass(frozen=True)
class LocationResult:
    """Either a position or an error kind, never both."""
    position: Optional[GeoPoint] = None
    error: Optional[LocationErrorKind] = None
    detail: Optional[str] = None

    @classmethod
    def ok(cls, position: GeoPoint) -> "LocationResult":
        return cls(position=position)

    @classmethod
    def failed(cls, error: LocationErrorKind, detail: Optional[str] = None) -> "LocationResult":
        return cls(error=error, detail=detail)

    @property
    def is_ok(self) -> bool:
        return self.position is not None and self.error is None

    def to_exception(self) -> LocationError:
        """Build the core error matching this result's error kind."""
        error_cls, message = _LOCATION_ERRORS.get(self.error, (LocationError, "Location unavailable"))
        return error_cls(self.detail or message)


class LocationSource(ABC):
    """Supplies the device's current position."""

    @abstractmethod
    async def get_current_position(self) -> LocationResult:
        """
        Resolve the current position.

        Must return LocationResult.failed(...) for service-disabled or
        permission failures rather than raising.
        """
        raise NotImplementedError


class StaticLocationSource(LocationSource):
    """
    Location source with a fixed answer.

    Used for server-side runs (no device GPS) and tests. Either a position
    or an error kind can be configured; set_position/set_error change it.
    """

    def __init__(self, position: Optional[GeoPoint] = None, error: Optional[LocationErrorKind] = None):
        self._position = position
        self._error = error
        self.calls = 0

    def set_position(self, position: GeoPoint) -> None:
        self._position = position
        self._error = None

    def set_error(self, error: LocationErrorKind) -> None:
        self._error = error

    async def get_current_position(self) -> LocationResult:
        self.calls += 1
        if self._error is not None:
            return LocationResult.failed(self._error)
        if self._position is None:
            return LocationResult.failed(LocationErrorKind.SERVICE_DISABLED, "No position configured")
        return LocationResult.ok(self._position)


# ----------------------------------------------------------------------
# Session
# ----------------------------------------------------------------------

class SessionContext(ABC):
    """Supplies the currently authenticated user (or None)."""

    @property
    @abstractmethod
    def current_user(self) -> Optional[User]:
        raise NotImplementedError


class InMemorySessionContext(SessionContext):
    """
    Minimal session layer: a registry of known users and one current user.

    Authentication is out of scope; sign_in simply selects a registered user.
    """

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._current_user_id: Optional[str] = None

    @property
    def current_user(self) -> Optional[User]:
        if self._current_user_id is None:
            return None
        return self._users.get(self._current_user_id)

    def register(self, user: User) -> User:
        self._users[user.id] = user
        logger.info(f"Registered session user {user.id} ({user.role.value})")
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def users(self) -> List[User]:
        return list(self._users.values())

    def sign_in(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        self._current_user_id = user.id if user else None
        return user

    def sign_out(self) -> None:
        self._current_user_id = None


# ----------------------------------------------------------------------
# Alert delivery
# ----------------------------------------------------------------------

class AlertDispatcher(ABC):
    """Best-effort push/local-notification transport."""

    @abstractmethod
    def deliver(self, notification: Notification, urgency: str) -> bool:
        """
        Hand a notification to the transport.

        Returns True when accepted. Failures are logged by the caller and
        never surface as core errors.
        """
        raise NotImplementedError


class LoggingAlertDispatcher(AlertDispatcher):
    """
    SIMULATED dispatcher: logs the alert and keeps a preview in memory.
    No messages leave the process.
    """

    def __init__(self, keep_last: int = 100):
        self.keep_last = keep_last
        self.delivered: List[Tuple[Notification, str]] = []

    def deliver(self, notification: Notification, urgency: str) -> bool:
        logger.info(
            f"[{urgency.upper()}] {notification.channel.value} alert: {notification.title}"
        )
        self.delivered.append((notification, urgency))
        if len(self.delivered) > self.keep_last:
            del self.delivered[: len(self.delivered) - self.keep_last]
        return True
