"""
Notification routes - alert list, unread badge and read tracking.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from reliefhub.models.notification import Notification, NotificationCreate
from reliefhub.routes.deps import get_container
from reliefhub.services.container import ServiceContainer

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[Notification])
async def list_notifications(
    channel: Optional[str] = Query(None, description="emergency | relief-update | volunteer-request | achievement"),
    unread_only: bool = Query(False),
    container: ServiceContainer = Depends(get_container),
):
    return container.notifications.list(channel=channel, unread_only=unread_only)


@router.post("", response_model=Notification, status_code=status.HTTP_201_CREATED)
async def push_notification(payload: NotificationCreate, container: ServiceContainer = Depends(get_container)):
    return container.notifications.push(payload)


@router.get("/unread-count")
async def unread_count(container: ServiceContainer = Depends(get_container)):
    return {"unread": container.notifications.unread_count()}


@router.post("/read-all")
async def mark_all_read(container: ServiceContainer = Depends(get_container)):
    changed = container.notifications.mark_all_read()
    return {"marked": changed, "unread": container.notifications.unread_count()}


@router.post("/{notification_id}/read")
async def mark_read(notification_id: str, container: ServiceContainer = Depends(get_container)):
    changed = container.notifications.mark_read(notification_id)
    return {
        "id": notification_id,
        "changed": changed,
        "unread": container.notifications.unread_count(),
    }
