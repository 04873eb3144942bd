from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from proximity.api.deps import (
    get_current_session,
    get_geocode_service,
    get_location_info_service,
    get_origin,
)
from proximity.core.session import UserSession
from proximity.schemas.common import ErrorResponse
from proximity.schemas.location import LocationInfo, LocationSearchItem
from proximity.services.geocode import GeocodeService
from proximity.services.location_info import LocationInfoService
from proximity.utils.geo import Coordinate

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get(
    "/search",
    response_model=list[LocationSearchItem],
    summary="Forward geocoding",
    description="Up to 5 matches; an upstream failure yields an empty list.",
)
async def search_locations(
    q: str = Query(..., min_length=1, max_length=200, description="Place name or address"),
    _: UserSession = Depends(get_current_session),
    svc: GeocodeService = Depends(get_geocode_service),
):
    return await svc.search(q)


@router.get(
    "/info",
    response_model=LocationInfo,
    summary="Describe a place",
    responses={503: {"model": ErrorResponse, "description": "LLM not configured"}},
)
async def location_info(
    name: str = Query(..., min_length=1, max_length=200),
    origin: Coordinate = Depends(get_origin),
    _: UserSession = Depends(get_current_session),
    svc: LocationInfoService = Depends(get_location_info_service),
):
    return await svc.describe(name, origin)
