"""
Pydantic models for in-app notifications.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class NotificationChannel(str, Enum):
    """Channel controls delivery urgency and display styling."""
    EMERGENCY = "emergency"
    RELIEF_UPDATE = "relief-update"
    VOLUNTEER_REQUEST = "volunteer-request"
    ACHIEVEMENT = "achievement"


class NotificationCreate(BaseModel):
    """
    Payload for pushing a notification.
    channel is a raw string so an unknown value surfaces as InvalidChannelError.
    """
    id: Optional[str] = Field(None, min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field("", max_length=2000)
    channel: str = Field(..., description="emergency | relief-update | volunteer-request | achievement")

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Flood warning",
                "body": "Move to higher ground within 3 hours.",
                "channel": "emergency",
            }
        }


class Notification(BaseModel):
    """A stored notification. Once read it is never marked unread again."""
    id: str
    title: str
    body: str = ""
    channel: NotificationChannel
    read: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        frozen = True
