"""API endpoints for the disaster risk service."""

import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi_cache.decorator import cache
from starlette.concurrency import run_in_threadpool

from disaster_risk.config import (
    DEFAULT_LAT, DEFAULT_LON, DEFAULT_CITY, DEFAULT_COUNTRY,
    CACHE_EXPIRE_SECONDS, MIN_SEARCH_LENGTH
)
from disaster_risk.dashboard.controller import DashboardController
from disaster_risk.dashboard.state import DashboardState
from disaster_risk.hazards.models import HazardType, RiskAssessment
from disaster_risk.hazards.service import RiskService
from disaster_risk.weather.geocoding import GeocodingError
from disaster_risk.weather.models import ErrorResponse, Location

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/risk", tags=["risk"])


@lru_cache(maxsize=1)
def get_risk_service() -> RiskService:
    """Dependency returning the process-wide risk service."""
    return RiskService()


@lru_cache(maxsize=1)
def get_dashboard_controller() -> DashboardController:
    """Dependency returning the dashboard session refreshed in the background."""
    return DashboardController(risk_service=get_risk_service())


@router.get(
    "/",
    response_model=RiskAssessment,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}
)
async def get_risk_assessment(
    lat: Optional[float] = Query(
        None,
        ge=-90,
        le=90,
        description="Latitude in decimal degrees (use with lon)"
    ),
    lon: Optional[float] = Query(
        None,
        ge=-180,
        le=180,
        description="Longitude in decimal degrees (use with lat)"
    ),
    name: Optional[str] = Query(
        None,
        description="Display name for the coordinates"
    ),
    city: Optional[str] = Query(
        None,
        description="City name (alternative to lat/lon, not both)"
    ),
    risk_service: RiskService = Depends(get_risk_service)
) -> RiskAssessment:
    """Get disaster risk scores for a location.

    Args:
        lat: Latitude in decimal degrees (must provide with lon)
        lon: Longitude in decimal degrees (must provide with lat)
        name: Optional display name for the coordinates
        city: City name as alternative to lat/lon

    Returns:
        RiskAssessment with weather, historical patterns and risk scores

    Raises:
        HTTPException: If parameters are invalid or the assessment fails
    """
    try:
        location = await resolve_location(lat, lon, name, city, risk_service)
    except GeocodingError as e:
        logger.error(f"Geocoding error: {e}")
        raise HTTPException(status_code=404, detail=str(e))

    try:
        assessment = await risk_service.assess(location)

        logger.info(f"Successfully assessed {location.name} from {assessment.data_source.value} data")
        return assessment

    except ValueError as e:
        logger.error(f"Error assessing risk: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logger.error(f"Unexpected error assessing risk: {e}")
        raise HTTPException(status_code=502, detail="Risk assessment temporarily unavailable")


async def resolve_location(
    lat: Optional[float],
    lon: Optional[float],
    name: Optional[str],
    city: Optional[str],
    risk_service: RiskService
) -> Location:
    """
    Validate request parameters and turn them into a Location.

    Raises:
        HTTPException: If parameters are inconsistent
        GeocodingError: If the city cannot be found
    """
    has_coordinates = lat is not None or lon is not None
    has_city = city is not None

    if has_coordinates and has_city:
        raise HTTPException(
            status_code=400,
            detail="Cannot provide both coordinates and city name. Use either lat/lon OR city."
        )

    if has_city:
        return await run_in_threadpool(risk_service.geocoding_service.resolve_city, city)

    if has_coordinates:
        if lat is None or lon is None:
            raise HTTPException(
                status_code=400,
                detail="Both latitude and longitude must be provided when using coordinates."
            )
        return Location(name=name or f"{lat:.4f}, {lon:.4f}", lat=lat, lon=lon)

    logger.info(f"Using default location: {DEFAULT_CITY}")
    return Location(name=DEFAULT_CITY, lat=DEFAULT_LAT, lon=DEFAULT_LON, country=DEFAULT_COUNTRY)


@router.get("/search", response_model=List[Location])
@cache(expire=CACHE_EXPIRE_SECONDS)
async def search_locations(
    q: str = Query(..., description=f"Place name, at least {MIN_SEARCH_LENGTH} characters to search"),
    risk_service: RiskService = Depends(get_risk_service)
) -> List[Location]:
    """Search locations by name.

    Results are cached to stay within Nominatim's usage policy.
    """
    # Nominatim client is synchronous
    return await run_in_threadpool(risk_service.geocoding_service.search, q)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "service": "disaster-risk"}


@router.get("/info")
async def get_service_info() -> dict:
    """Get service information.

    Returns:
        Service information including default location and data sources
    """
    return {
        "service": "Disaster Risk Service",
        "version": "0.1.0",
        "default_location": {
            "city": DEFAULT_CITY,
            "latitude": DEFAULT_LAT,
            "longitude": DEFAULT_LON,
        },
        "hazards": [hazard.value for hazard in HazardType],
        "data_sources": ["OpenWeatherMap", "OpenStreetMap Nominatim", "NOAA NWS", "USGS"],
    }


@router.get("/dashboard", response_model=DashboardState)
async def get_dashboard(
    controller: DashboardController = Depends(get_dashboard_controller)
) -> DashboardState:
    """Get the dashboard state, including the latest assessment for its location."""
    return controller.state


@router.post("/dashboard/location", response_model=DashboardState)
async def select_dashboard_location(
    location: Location,
    controller: DashboardController = Depends(get_dashboard_controller)
) -> DashboardState:
    """Switch the dashboard to a location and fetch its assessment.

    Args:
        location: Location to display, usually one of the search results

    Returns:
        Dashboard state once the fetch for this location has settled
    """
    return await controller.select_location(location)


@router.post("/dashboard/refresh", response_model=DashboardState)
async def refresh_dashboard(
    controller: DashboardController = Depends(get_dashboard_controller)
) -> DashboardState:
    """Refetch the assessment for the current dashboard location."""
    return await controller.load()


@router.get("/dashboard/search", response_model=DashboardState)
async def search_dashboard(
    q: str = Query("", description=f"Search box contents; lookups start at {MIN_SEARCH_LENGTH} characters"),
    controller: DashboardController = Depends(get_dashboard_controller)
) -> DashboardState:
    """Update the dashboard search box and its results."""
    if not q.strip():
        return controller.clear_search()
    return await controller.search(q)
