"""
Error kinds raised by the ReliefHub core.

Store-level structural errors (NotFound, DuplicateId, InvalidChannel,
InvalidCoordinate) are returned to the caller and never swallowed.
Location errors originate in the LocationSource and are only raised from
RecommendationEngine.generate() when no fallback position exists.
"""


class ReliefHubError(Exception):
    """Base class for all core errors."""


class NotFoundError(ReliefHubError, LookupError):
    """Unknown id on get/update/remove/mark_read."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class DuplicateIdError(ReliefHubError, ValueError):
    """Id already present in a store, or previously retired."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} id {entity_id} is already in use")


class InvalidChannelError(ReliefHubError, ValueError):
    """Notification channel is not one of the recognized values."""

    def __init__(self, channel):
        self.channel = channel
        super().__init__(f"Invalid notification channel: {channel!r}")


class InvalidCoordinateError(ReliefHubError, ValueError):
    """Latitude/longitude out of range or not a finite number."""

    def __init__(self, latitude, longitude):
        self.latitude = latitude
        self.longitude = longitude
        super().__init__(
            f"Invalid coordinate ({latitude}, {longitude}): "
            f"latitude must be within [-90, 90] and longitude within [-180, 180]"
        )


class LocationError(ReliefHubError):
    """Base class for failures reported by a LocationSource."""

    kind = "location_error"


class ServiceDisabledError(LocationError):
    kind = "service_disabled"


class PermissionDeniedError(LocationError):
    kind = "permission_denied"


class PermissionDeniedPermanentlyError(PermissionDeniedError):
    kind = "permission_denied_permanently"


class LocationTimeoutError(LocationError):
    kind = "timeout"
