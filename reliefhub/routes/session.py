"""
Session routes - register users and pick the current one.

Authentication is out of scope; this only feeds the in-memory session
collaborator so the core has a current user to work with.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from reliefhub.models.base import BaseResponse
from reliefhub.models.user import User
from reliefhub.routes.deps import get_container
from reliefhub.services.container import ServiceContainer

router = APIRouter(prefix="/session", tags=["Session"])


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def register_user(user: User, container: ServiceContainer = Depends(get_container)):
    return container.session.register(user)


@router.get("/users", response_model=List[User])
async def list_users(container: ServiceContainer = Depends(get_container)):
    return container.session.users()


@router.post("/sign-in/{user_id}", response_model=User)
async def sign_in(user_id: str, container: ServiceContainer = Depends(get_container)):
    user = container.session.sign_in(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {user_id} not found")
    return user


@router.post("/sign-out", response_model=BaseResponse)
async def sign_out(container: ServiceContainer = Depends(get_container)):
    user = container.session.current_user
    if user is not None:
        container.recommendations.reset_session(user.id)
    container.session.sign_out()
    return BaseResponse(message="Signed out")
