from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    free_text: str | None = Field(default=None, validation_alias=AliasChoices("free_text", "query", "freeText"))
    category: str | None = None
    latitude: float | None = Field(default=None, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float | None = Field(default=None, validation_alias=AliasChoices("longitude", "lon", "lng"))
    radius_km: float | None = Field(default=None, validation_alias=AliasChoices("radius_km", "radiusKm"))
    rating_min: float | None = Field(default=None, validation_alias=AliasChoices("rating_min", "ratingMin"))
    price_range: str | None = Field(default=None, validation_alias=AliasChoices("price_range", "priceRange"))
    open_now_only: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("open_now_only", "is_open_now", "openNowOnly"),
    )
    accepts_cod: bool | None = Field(default=None, validation_alias=AliasChoices("accepts_cod", "acceptsCOD"))
    has_offers: bool | None = Field(default=None, validation_alias=AliasChoices("has_offers", "hasOffers"))
    sort_by: str | None = Field(default=None, validation_alias=AliasChoices("sort_by", "sortBy"))
    limit: int | None = None
    offset: int | None = None


class BusinessSearchResult(BaseModel):
    id: str
    name: str
    description: str | None = None
    category_type: list[str] = Field(default_factory=list)
    lat: float
    lng: float
    address: str | None = None
    business_phone: str | None = None
    logo_url: str | None = None
    cover_image_url: str | None = None
    operating_hours: dict[str, Any] | None = None
    realtime_status: str
    avg_rating: float = Field(ge=0, le=5)
    total_reviews: int = Field(ge=0)
    accepts_cod: bool
    has_offers: bool
    is_verified: bool
    verified_badge: bool
    commission_rate: float
    min_order_amount: float
    delivery_charge: float | None = None
    delivery_radius_km: float | None = None
    created_at: datetime
    distance_km: float | None = None
    distance_text: str | None = None
    rating_text: str
    estimated_delivery_minutes: int | None = None
    estimated_delivery_text: str | None = None
    price_range_category: Literal["low", "medium", "high"]
    is_currently_open: bool


class CategoryCount(BaseModel):
    category: str
    count: int = Field(ge=1)


class SearchResponse(BaseModel):
    results: list[BusinessSearchResult]
    total_count: int
    popular_categories: list[CategoryCount]
    has_more: bool
    sort_by: str
    limit: int
    offset: int
    request_id: str | None = None


class PopularCategoriesResponse(BaseModel):
    categories: list[CategoryCount]


class GeocodeRequest(BaseModel):
    address: str


class ReverseGeocodeRequest(BaseModel):
    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lon", "lng"))


class AddressComponent(BaseModel):
    long_name: str
    short_name: str
    types: list[str] = Field(default_factory=list)


class GeocodeResult(BaseModel):
    latitude: float
    longitude: float
    formatted_address: str
    place_id: str | None = None
    address_components: list[AddressComponent] = Field(default_factory=list)


class DistanceRequest(BaseModel):
    from_lat: float = Field(validation_alias=AliasChoices("from_lat", "fromLat"))
    from_lon: float = Field(validation_alias=AliasChoices("from_lon", "from_lng", "fromLon", "fromLng"))
    to_lat: float = Field(validation_alias=AliasChoices("to_lat", "toLat"))
    to_lon: float = Field(validation_alias=AliasChoices("to_lon", "to_lng", "toLon", "toLng"))
    mode: str | None = None


class DistanceEstimate(BaseModel):
    distance_km: float = Field(ge=0)
    duration_minutes: int = Field(ge=0)
    route_type: Literal["routed", "straight_line"]
    mode: str
    distance_text: str | None = None
    duration_text: str | None = None


class ErrorResponse(BaseModel):
    detail: str
    field: str | None = None


class HealthResponse(BaseModel):
    status: str


class HealthMetricsResponse(BaseModel):
    sample_size: int
    avg_db_time_ms: float
    avg_filtering_time_ms: float
    avg_ranking_time_ms: float
    avg_provider_time_ms: float
    avg_total_time_ms: float
