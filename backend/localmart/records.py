from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .models import Business


@dataclass(frozen=True)
class BusinessRecord:
    """Immutable per-request snapshot of a business row."""

    id: str
    name: str
    lat: float
    lng: float
    created_at: datetime
    description: str | None = None
    category_tags: tuple[str, ...] = ()
    operating_hours: Any = None
    realtime_status: str = "offline"
    avg_rating: float = 0.0
    total_reviews: int = 0
    accepts_cod: bool = False
    has_offers: bool = False
    is_verified: bool = False
    commission_rate: float = 0.0
    min_order_amount: float = 0.0
    delivery_charge: float | None = None
    delivery_radius_km: float | None = None
    address: str | None = None
    business_phone: str | None = None
    logo_url: str | None = None
    cover_image_url: str | None = None
    is_approved: bool = True
    is_active: bool = True

    @property
    def is_visible(self) -> bool:
        return self.is_approved and self.is_active

    @classmethod
    def from_model(cls, row: Business) -> "BusinessRecord":
        raw_tags = row.category_type if isinstance(row.category_type, list) else []
        hours = row.operating_hours if isinstance(row.operating_hours, dict) else None
        return cls(
            id=str(row.id),
            name=row.name,
            description=row.description,
            category_tags=tuple(tag for tag in raw_tags if isinstance(tag, str)),
            lat=float(row.lat),
            lng=float(row.lng),
            operating_hours=copy.deepcopy(hours),
            realtime_status=row.realtime_status,
            avg_rating=float(row.avg_rating or 0.0),
            total_reviews=int(row.total_reviews or 0),
            accepts_cod=bool(row.accepts_cod),
            has_offers=bool(row.has_offers),
            is_verified=bool(row.is_verified),
            commission_rate=float(row.commission_rate or 0.0),
            min_order_amount=float(row.min_order_amount or 0.0),
            delivery_charge=row.delivery_charge,
            delivery_radius_km=row.delivery_radius_km,
            address=row.address,
            business_phone=row.business_phone,
            logo_url=row.logo_url,
            cover_image_url=row.cover_image_url,
            is_approved=bool(row.is_approved),
            is_active=bool(row.is_active),
            created_at=row.created_at,
        )
