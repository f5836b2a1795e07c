"""
FastAPI dependencies shared by the routers.
"""

from typing import Optional

from fastapi import Header, Request

from reliefhub.models.user import User
from reliefhub.services.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_acting_user(
    request: Request,
    user_id: Optional[str] = Header(None, alias="X-User-ID", description="Acting user id"),
) -> Optional[User]:
    """
    Resolve the acting user: the X-User-ID header when given, otherwise the
    session's current user. Unknown ids resolve to None.
    """
    session = get_container(request).session
    if user_id:
        return session.get_user(user_id)
    return session.current_user
