"""
Shared pydantic models.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional


class BaseResponse(BaseModel):
    """
    Base response model for API responses.
    """
    success: bool = True
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class GeoPoint(BaseModel):
    """
    A (latitude, longitude) pair in decimal degrees.

    Range validation is done by reliefhub.utils.geo so that callers get
    InvalidCoordinateError rather than a pydantic ValidationError.
    """
    latitude: float = Field(..., description="Latitude in decimal degrees")
    longitude: float = Field(..., description="Longitude in decimal degrees")

    class Config:
        frozen = True
