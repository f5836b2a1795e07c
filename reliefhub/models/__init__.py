"""
Pydantic models for ReliefHub.

DESIGN PRINCIPLE:
- Models reflect data structure, not business logic
- Range checks that map to core error kinds live in the stores/GeoUtil
"""

from reliefhub.models.base import BaseResponse, GeoPoint
from reliefhub.models.user import User, UserRole
from reliefhub.models.relief_point import (
    ReliefCategory,
    ReliefPoint,
    ReliefPointCreate,
    ReliefPointUpdate,
)
from reliefhub.models.recommendation import (
    ActionType,
    Priority,
    Recommendation,
    RecommendationAction,
    RecommendationSource,
)
from reliefhub.models.notification import (
    Notification,
    NotificationChannel,
    NotificationCreate,
)

__all__ = [
    "ActionType",
    "BaseResponse",
    "GeoPoint",
    "Notification",
    "NotificationChannel",
    "NotificationCreate",
    "Priority",
    "Recommendation",
    "RecommendationAction",
    "RecommendationSource",
    "ReliefCategory",
    "ReliefPoint",
    "ReliefPointCreate",
    "ReliefPointUpdate",
    "User",
    "UserRole",
]
