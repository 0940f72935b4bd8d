from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from ..records import BusinessRecord
from ..schemas import BusinessSearchResult

BASE_DELIVERY_MINUTES = 30
DELIVERY_MINUTES_PER_KM = 5


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{_round_half_up(distance_km * 1000)}m away"
    return f"{distance_km:.1f}km away"


def format_rating(avg_rating: float, review_count: int) -> str:
    if review_count == 0:
        return "No reviews yet"
    return f"{avg_rating:.1f} ({review_count} reviews)"


def estimate_delivery_minutes(distance_km: float) -> int:
    return _round_half_up(BASE_DELIVERY_MINUTES + DELIVERY_MINUTES_PER_KM * distance_km)


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} mins"
    hours, remainder = divmod(minutes, 60)
    if remainder == 0:
        return f"{hours}h"
    return f"{hours}h {remainder}m"


def determine_price_range(commission_rate: float, min_order_amount: float) -> str:
    if min_order_amount < 100 and commission_rate < 3:
        return "low"
    if min_order_amount < 500 and commission_rate < 5:
        return "medium"
    return "high"


def schedule_for_display(schedule: Any) -> dict[str, Any] | None:
    """Copy of a weekly schedule keyed by strings; anything that is not a mapping becomes None."""
    if not isinstance(schedule, Mapping):
        return None
    return {str(day): hours for day, hours in schedule.items()}


def enrich(record: BusinessRecord, *, distance_km: float | None, is_currently_open: bool) -> BusinessSearchResult:
    delivery_minutes = estimate_delivery_minutes(distance_km) if distance_km is not None else None
    return BusinessSearchResult(
        id=record.id,
        name=record.name,
        description=record.description,
        category_type=list(record.category_tags),
        lat=record.lat,
        lng=record.lng,
        address=record.address,
        business_phone=record.business_phone,
        logo_url=record.logo_url,
        cover_image_url=record.cover_image_url,
        operating_hours=schedule_for_display(record.operating_hours),
        realtime_status=record.realtime_status,
        avg_rating=record.avg_rating,
        total_reviews=record.total_reviews,
        accepts_cod=record.accepts_cod,
        has_offers=record.has_offers,
        is_verified=record.is_verified,
        verified_badge=record.is_verified,
        commission_rate=record.commission_rate,
        min_order_amount=record.min_order_amount,
        delivery_charge=record.delivery_charge,
        delivery_radius_km=record.delivery_radius_km,
        created_at=record.created_at,
        distance_km=distance_km,
        distance_text=format_distance(distance_km) if distance_km is not None else None,
        rating_text=format_rating(record.avg_rating, record.total_reviews),
        estimated_delivery_minutes=delivery_minutes,
        estimated_delivery_text=format_duration(delivery_minutes) if delivery_minutes is not None else None,
        price_range_category=determine_price_range(record.commission_rate, record.min_order_amount),
        is_currently_open=is_currently_open,
    )
