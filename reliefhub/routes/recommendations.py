"""
Recommendation routes - generate, feedback, dismiss and insights.

The acting user comes from the X-User-ID header or the session's current
user. With no user, generate returns an empty list rather than an error.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from reliefhub.models.recommendation import Recommendation
from reliefhub.models.user import User
from reliefhub.routes.deps import get_acting_user, get_container
from reliefhub.services.container import ServiceContainer

router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


class FeedbackRequest(BaseModel):
    category: str = Field(..., min_length=1, description="Category, tag or recommendation id")
    positive: bool


class FeedbackResponse(BaseModel):
    category: str
    weight: float


def _require_user(user: Optional[User]) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No current user")
    return user


@router.post("/generate", response_model=List[Recommendation])
async def generate_recommendations(
    user: Optional[User] = Depends(get_acting_user),
    container: ServiceContainer = Depends(get_container),
):
    if user is None:
        return []
    return await container.recommendations.generate(user)


@router.get("", response_model=List[Recommendation])
async def active_recommendations(
    user: Optional[User] = Depends(get_acting_user),
    container: ServiceContainer = Depends(get_container),
):
    if user is None:
        return []
    return container.recommendations.recommendations(user.id)


@router.post("/feedback", response_model=FeedbackResponse)
async def provide_feedback(
    payload: FeedbackRequest,
    user: Optional[User] = Depends(get_acting_user),
    container: ServiceContainer = Depends(get_container),
):
    user = _require_user(user)
    weight = container.recommendations.provide_feedback(payload.category, payload.positive, user_id=user.id)
    return FeedbackResponse(category=payload.category, weight=weight)


@router.post("/{recommendation_id}/dismiss")
async def dismiss_recommendation(
    recommendation_id: str,
    user: Optional[User] = Depends(get_acting_user),
    container: ServiceContainer = Depends(get_container),
):
    user = _require_user(user)
    container.recommendations.dismiss_recommendation(recommendation_id, user_id=user.id)
    return {"id": recommendation_id, "dismissed": True}


@router.get("/insights")
async def insights(
    user: Optional[User] = Depends(get_acting_user),
    container: ServiceContainer = Depends(get_container),
) -> Dict[str, Any]:
    user = _require_user(user)
    return container.recommendations.insights(user)
