"""
Relief point routes - CRUD, category filter, search and nearby queries.

Core errors (NotFound, DuplicateId, InvalidCoordinate) propagate to the
exception handlers registered in reliefhub.main.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from reliefhub.models.base import GeoPoint
from reliefhub.models.relief_point import ReliefCategory, ReliefPoint, ReliefPointCreate, ReliefPointUpdate
from reliefhub.routes.deps import get_container
from reliefhub.services.container import ServiceContainer
from reliefhub.utils.geo import format_distance

router = APIRouter(prefix="/relief-points", tags=["Relief Points"])


class NearbyReliefPoint(BaseModel):
    point: ReliefPoint
    distance_meters: float
    distance: str


@router.get("", response_model=List[ReliefPoint])
async def list_relief_points(
    category: Optional[ReliefCategory] = Query(None, description="Filter by category"),
    container: ServiceContainer = Depends(get_container),
):
    return container.relief_points.filter_by_category(category)


@router.post("", response_model=ReliefPoint, status_code=status.HTTP_201_CREATED)
async def add_relief_point(payload: ReliefPointCreate, container: ServiceContainer = Depends(get_container)):
    return container.relief_points.add(payload)


@router.get("/search", response_model=List[ReliefPoint])
async def search_relief_points(
    q: str = Query("", description="Case-insensitive text to look for"),
    category: Optional[ReliefCategory] = Query(None),
    container: ServiceContainer = Depends(get_container),
):
    return container.relief_points.search(q, category)


@router.get("/nearby", response_model=List[NearbyReliefPoint])
async def nearby_relief_points(
    lat: float = Query(..., description="Origin latitude"),
    lon: float = Query(..., description="Origin longitude"),
    radius: float = Query(5000.0, ge=0, description="Radius in meters"),
    category: Optional[ReliefCategory] = Query(None),
    container: ServiceContainer = Depends(get_container),
):
    origin = GeoPoint(latitude=lat, longitude=lon)
    return [
        NearbyReliefPoint(point=point, distance_meters=round(distance, 1), distance=format_distance(distance))
        for point, distance in container.relief_points.nearby_with_distance(origin, radius, category)
    ]


@router.get("/{point_id}", response_model=ReliefPoint)
async def get_relief_point(point_id: str, container: ServiceContainer = Depends(get_container)):
    return container.relief_points.get(point_id)


@router.patch("/{point_id}", response_model=ReliefPoint)
async def update_relief_point(
    point_id: str,
    patch: ReliefPointUpdate,
    container: ServiceContainer = Depends(get_container),
):
    return container.relief_points.update(point_id, patch)


@router.delete("/{point_id}", response_model=ReliefPoint)
async def remove_relief_point(point_id: str, container: ServiceContainer = Depends(get_container)):
    return container.relief_points.remove(point_id)
