"""
Pydantic models for relief points.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from reliefhub.models.base import GeoPoint


class ReliefCategory(str, Enum):
    FOOD = "food"
    MEDICAL = "medical"
    SHELTER = "shelter"
    SUPPLIES = "supplies"


class ReliefPointCreate(BaseModel):
    """
    Payload for adding a relief point.
    An id may be supplied by the caller; otherwise the store assigns one.
    """
    id: Optional[str] = Field(None, min_length=1, description="Optional caller-assigned id")
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)
    category: ReliefCategory
    location: GeoPoint
    location_label: Optional[str] = Field(None, max_length=300, description="Human-readable place name")
    open_hours: Optional[str] = Field(None, max_length=100, description="e.g. '8 AM - 8 PM'")
    capacity: Optional[int] = Field(None, ge=0, description="Remaining capacity, if tracked")
    contact_phone: Optional[str] = Field(None, max_length=30)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Community Kitchen",
                "description": "Hot meals twice a day",
                "category": "food",
                "location": {"latitude": 22.7196, "longitude": 75.8577},
                "location_label": "Rajwada, Indore",
                "open_hours": "8 AM - 8 PM",
                "capacity": 150,
            }
        }
        extra = "ignore"


class ReliefPointUpdate(BaseModel):
    """Partial update. Only fields that are set are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[ReliefCategory] = None
    location: Optional[GeoPoint] = None
    location_label: Optional[str] = Field(None, max_length=300)
    open_hours: Optional[str] = Field(None, max_length=100)
    capacity: Optional[int] = Field(None, ge=0)
    contact_phone: Optional[str] = Field(None, max_length=30)

    class Config:
        extra = "ignore"


class ReliefPoint(BaseModel):
    """A stored relief point. Identity is the id, which is never reused."""
    id: str
    title: str
    description: str = ""
    category: ReliefCategory
    location: GeoPoint
    location_label: Optional[str] = None
    open_hours: Optional[str] = None
    capacity: Optional[int] = None
    contact_phone: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        frozen = True

    @property
    def has_capacity(self) -> bool:
        # Untracked capacity counts as available
        return self.capacity is None or self.capacity > 0
