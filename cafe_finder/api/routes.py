# Proximity search endpoints (radius or viewport, optional amenity filter).

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from typing import Optional

from cafe_finder.core.errors import UpstreamUnavailable
from cafe_finder.models.dto import ErrorResponse, NearbyResponse
from cafe_finder.services.search_service import NearbySearchService
from cafe_finder.services.validation import SearchLimits, build_search_request

router = APIRouter()

SEARCH_RESPONSES = {
    400: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}

def get_search_service(request: Request) -> NearbySearchService:
    """Return the search service built at startup (see main.lifespan)."""
    service = getattr(request.app.state, "search_service", None)
    if service is None:
        raise UpstreamUnavailable("store_init", "Search service is not initialized.")
    return service

def get_general_limits(request: Request) -> SearchLimits:
    """Radius and limit bounds for /cafes/nearby, built from the app settings."""
    return request.app.state.general_limits

def get_feature_limits(request: Request) -> SearchLimits:
    return request.app.state.feature_limits

async def _respond(service: NearbySearchService, search_request) -> JSONResponse:
    assembled = await service.search(search_request)
    return JSONResponse(
        content=assembled.to_json(),
        headers={
            "Cache-Control": assembled.cache_control,
            "X-Cache-Key": assembled.cache_key,
        },
    )

# ----------------------------------------------------------------------
# General nearby search
# ----------------------------------------------------------------------
@router.get("/cafes/nearby", response_model=NearbyResponse, responses=SEARCH_RESPONSES)
async def nearby_cafes(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    radius: Optional[str] = None,
    limit: Optional[str] = None,
    feature: Optional[str] = None,
    ne_lat: Optional[str] = Query(None, alias="neLat"),
    ne_lng: Optional[str] = Query(None, alias="neLng"),
    sw_lat: Optional[str] = Query(None, alias="swLat"),
    sw_lng: Optional[str] = Query(None, alias="swLng"),
    service: NearbySearchService = Depends(get_search_service),
    limits: SearchLimits = Depends(get_general_limits),
):
    """Cafes within `radius` meters of (lat, lng), or inside the neLat/neLng/swLat/swLng viewport."""
    search_request = build_search_request(
        limits,
        lat=lat,
        lng=lng,
        radius=radius,
        limit=limit,
        feature=feature,
        ne_lat=ne_lat,
        ne_lng=ne_lng,
        sw_lat=sw_lat,
        sw_lng=sw_lng,
    )
    return await _respond(service, search_request)

# ----------------------------------------------------------------------
# Nearby search filtered by an amenity (wifi, outlets, quiet, time-limit)
# ----------------------------------------------------------------------
@router.get("/cafes/nearby-feature", response_model=NearbyResponse, responses=SEARCH_RESPONSES)
async def nearby_cafes_with_feature(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    feature: Optional[str] = None,
    radius: Optional[str] = None,
    limit: Optional[str] = None,
    ne_lat: Optional[str] = Query(None, alias="neLat"),
    ne_lng: Optional[str] = Query(None, alias="neLng"),
    sw_lat: Optional[str] = Query(None, alias="swLat"),
    sw_lng: Optional[str] = Query(None, alias="swLng"),
    service: NearbySearchService = Depends(get_search_service),
    limits: SearchLimits = Depends(get_feature_limits),
):
    """Same as /cafes/nearby with a required feature and larger radius/limit ceilings."""
    search_request = build_search_request(
        limits,
        lat=lat,
        lng=lng,
        radius=radius,
        limit=limit,
        feature=feature,
        ne_lat=ne_lat,
        ne_lng=ne_lng,
        sw_lat=sw_lat,
        sw_lng=sw_lng,
    )
    return await _respond(service, search_request)
