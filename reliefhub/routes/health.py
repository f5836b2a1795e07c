"""
Health check endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from reliefhub.services.container import ServiceContainer
from reliefhub.routes.deps import get_container

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(container: ServiceContainer = Depends(get_container)):
    """
    Basic health check endpoint.
    Returns 200 with store sizes if the service is running.
    """
    return {
        "status": "healthy",
        "service": container.settings.APP_NAME,
        "version": container.settings.APP_VERSION,
        "relief_points": len(container.relief_points),
        "notifications": len(container.notifications),
        "unread_notifications": container.notifications.unread_count(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
