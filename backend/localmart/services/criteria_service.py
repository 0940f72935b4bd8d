from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..errors import ValidationError

SORT_KEYS = ("distance", "rating", "popularity", "newest")
PRICE_RANGES = ("low", "medium", "high")
DEFAULT_RADIUS_KM = 10.0
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class SearchCriteria:
    free_text: str | None = None
    category: str | None = None
    origin: tuple[float, float] | None = None
    radius_km: float = DEFAULT_RADIUS_KM
    rating_min: float = 0.0
    price_range: str | None = None
    open_now_only: bool = False
    accepts_cod: bool | None = None
    has_offers: bool | None = None
    sort_by: str = "newest"
    limit: int = DEFAULT_LIMIT
    offset: int = 0


def _as_float(raw: Mapping[str, Any], field: str) -> float | None:
    value = raw.get(field)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(field, "must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, "must be a number") from None
    if not math.isfinite(number):
        raise ValidationError(field, "must be a finite number")
    return number


def _as_int(raw: Mapping[str, Any], field: str) -> int | None:
    value = raw.get(field)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(field, "must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(field, "must be an integer")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(field, "must be an integer") from None


def _as_bool(raw: Mapping[str, Any], field: str) -> bool | None:
    value = raw.get(field)
    if value is None or isinstance(value, bool):
        return value
    raise ValidationError(field, "must be a boolean")


def _as_text(raw: Mapping[str, Any], field: str) -> str | None:
    value = raw.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    cleaned = value.strip()
    return cleaned or None


def _as_query(raw: Mapping[str, Any], field: str) -> str | None:
    # Whitespace only decides whether a query is present; the match uses the query as sent.
    value = raw.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    return value if value.strip() else None


def validate_coordinates(lat: float, lon: float, *, lat_field: str = "latitude", lon_field: str = "longitude") -> None:
    if not math.isfinite(lat) or not -90.0 <= lat <= 90.0:
        raise ValidationError(lat_field, "must be between -90 and 90")
    if not math.isfinite(lon) or not -180.0 <= lon <= 180.0:
        raise ValidationError(lon_field, "must be between -180 and 180")


def _resolve_origin(raw: Mapping[str, Any]) -> tuple[float, float] | None:
    lat = _as_float(raw, "latitude")
    lon = _as_float(raw, "longitude")
    if lat is None and lon is None:
        return None
    if lat is None:
        raise ValidationError("latitude", "is required when longitude is given")
    if lon is None:
        raise ValidationError("longitude", "is required when latitude is given")
    validate_coordinates(lat, lon)
    return lat, lon


def resolve_sort_key(requested: str | None, has_origin: bool) -> str:
    if requested is None:
        return "distance" if has_origin else "newest"
    if requested == "distance" and not has_origin:
        return "newest"
    return requested


def build_search_criteria(
    raw: Mapping[str, Any],
    *,
    default_radius_km: float = DEFAULT_RADIUS_KM,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> SearchCriteria:
    """Validate raw request fields and apply defaults.

    ``raw`` uses the snake_case field names of ``SearchCriteria`` with the origin
    split into ``latitude``/``longitude``. Raises ``ValidationError`` naming the
    first offending field. ``limit`` is clamped rather than rejected.
    """
    origin = _resolve_origin(raw)

    radius_km = _as_float(raw, "radius_km")
    if radius_km is None:
        radius_km = default_radius_km
    if radius_km < 0:
        raise ValidationError("radius_km", "must be >= 0")

    rating_min = _as_float(raw, "rating_min")
    if rating_min is None:
        rating_min = 0.0
    if not 0.0 <= rating_min <= 5.0:
        raise ValidationError("rating_min", "must be between 0 and 5")

    price_range = _as_text(raw, "price_range")
    if price_range is not None:
        price_range = price_range.lower()
        if price_range not in PRICE_RANGES:
            raise ValidationError("price_range", f"must be one of {', '.join(PRICE_RANGES)}")

    sort_by = _as_text(raw, "sort_by")
    if sort_by is not None:
        sort_by = sort_by.lower()
        if sort_by not in SORT_KEYS:
            raise ValidationError("sort_by", f"must be one of {', '.join(SORT_KEYS)}")

    limit = _as_int(raw, "limit")
    if limit is None:
        limit = default_limit
    limit = max(1, min(max_limit, limit))

    offset = _as_int(raw, "offset")
    if offset is None:
        offset = 0
    if offset < 0:
        raise ValidationError("offset", "must be >= 0")

    return SearchCriteria(
        free_text=_as_query(raw, "free_text"),
        category=_as_text(raw, "category"),
        origin=origin,
        radius_km=radius_km,
        rating_min=rating_min,
        price_range=price_range,
        open_now_only=bool(_as_bool(raw, "open_now_only")),
        accepts_cod=_as_bool(raw, "accepts_cod"),
        has_offers=_as_bool(raw, "has_offers"),
        sort_by=resolve_sort_key(sort_by, origin is not None),
        limit=limit,
        offset=offset,
    )
