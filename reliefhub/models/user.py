"""
User model as supplied by the session layer.
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional, Set

from reliefhub.models.base import GeoPoint


class UserRole(str, Enum):
    """Who the user is in the relief effort."""
    VICTIM = "victim"
    VOLUNTEER = "volunteer"
    NGO = "ngo"


class User(BaseModel):
    """
    Authenticated user.

    The core never mutates a User; location refreshes are cached by the
    recommendation engine per user id.
    """
    id: str = Field(..., min_length=1, description="Session-assigned user id")
    display_name: str = Field(..., description="Name shown in the UI")
    email: str = Field(..., description="Contact email")
    role: UserRole = Field(..., description="victim | volunteer | ngo")
    location: Optional[GeoPoint] = Field(None, description="Last known location")
    tags: Set[str] = Field(default_factory=set, description="Skill or need tags, e.g. 'medical'")

    class Config:
        json_schema_extra = {
            "example": {
                "id": "u-1",
                "display_name": "Asha",
                "email": "asha@example.com",
                "role": "victim",
                "location": {"latitude": 22.7196, "longitude": 75.8577},
                "tags": ["medical"],
            }
        }
