from functools import lru_cache

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas import (
    DistanceEstimate,
    DistanceRequest,
    GeocodeRequest,
    GeocodeResult,
    PopularCategoriesResponse,
    ReverseGeocodeRequest,
    SearchRequest,
    SearchResponse,
)
from ..services.business_repository import SqlBusinessRepository
from ..services.geocode_service import GeocodeClient, GeocodeConfig, build_geocode_client
from ..services.search_service import SearchService

router = APIRouter(tags=["discovery"])


def get_search_service(db: Session = Depends(get_db)) -> SearchService:
    return SearchService(SqlBusinessRepository(db))


@lru_cache(maxsize=1)
def get_geocode_client() -> GeocodeClient:
    return build_geocode_client(GeocodeConfig.from_settings(settings))


@router.post("/search", response_model=SearchResponse)
def search(
    payload: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    return service.search(payload.model_dump(exclude_none=True))


@router.get("/businesses/nearby", response_model=SearchResponse)
def nearby_businesses(
    latitude: float = Query(...),
    longitude: float = Query(...),
    radius_km: float = Query(default=settings.nearby_default_radius_km),
    category: str | None = Query(default=None),
    limit: int = Query(default=settings.default_search_limit),
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    return service.search(
        {
            "latitude": latitude,
            "longitude": longitude,
            "radius_km": radius_km,
            "category": category,
            "limit": limit,
            "sort_by": "distance",
        }
    )


@router.get("/categories/popular", response_model=PopularCategoriesResponse)
def popular_categories(service: SearchService = Depends(get_search_service)) -> PopularCategoriesResponse:
    return PopularCategoriesResponse(categories=service.popular_categories())


@router.post("/geocode", response_model=GeocodeResult)
def geocode(
    payload: GeocodeRequest,
    client: GeocodeClient = Depends(get_geocode_client),
) -> GeocodeResult:
    return client.geocode(payload.address)


@router.post("/reverse-geocode", response_model=GeocodeResult)
def reverse_geocode(
    payload: ReverseGeocodeRequest,
    client: GeocodeClient = Depends(get_geocode_client),
) -> GeocodeResult:
    return client.reverse_geocode(payload.latitude, payload.longitude)


@router.post("/distance", response_model=DistanceEstimate)
def distance(
    payload: DistanceRequest,
    client: GeocodeClient = Depends(get_geocode_client),
) -> DistanceEstimate:
    return client.distance_between(
        (payload.from_lat, payload.from_lon),
        (payload.to_lat, payload.to_lon),
        payload.mode,
    )
