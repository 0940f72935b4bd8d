from __future__ import annotations

from dataclasses import dataclass, replace

from ..records import BusinessRecord
from .criteria_service import SearchCriteria
from .distance_service import bounding_box, haversine_km


def matches_text(record: BusinessRecord, query: str) -> bool:
    """Case-insensitive substring match of the whole query against name or description.

    The query is not tokenized: "fix plumb" only matches text containing that exact
    run of characters.
    """
    needle = query.casefold()
    if needle in record.name.casefold():
        return True
    return record.description is not None and needle in record.description.casefold()


@dataclass(frozen=True)
class BusinessFilter:
    """Predicate handed to a business repository.

    The default instance selects the whole searchable corpus (approved and active).
    """

    origin: tuple[float, float] | None = None
    radius_km: float | None = None
    category: str | None = None
    rating_min: float = 0.0
    accepts_cod: bool | None = None
    has_offers: bool | None = None
    free_text: str | None = None

    @property
    def has_geo_constraint(self) -> bool:
        return self.origin is not None and self.radius_km is not None

    def without_geo_constraint(self) -> "BusinessFilter":
        return replace(self, origin=None, radius_km=None)

    def bounding_box(self) -> tuple[float, float, float, float] | None:
        if not self.has_geo_constraint:
            return None
        lat, lng = self.origin
        return bounding_box(lat, lng, self.radius_km)

    def distance_km(self, record: BusinessRecord) -> float | None:
        if self.origin is None:
            return None
        lat, lng = self.origin
        return haversine_km(lat, lng, record.lat, record.lng)

    def matches_attributes(self, record: BusinessRecord) -> bool:
        """Every clause except the distance check."""
        if not record.is_visible:
            return False
        if self.category is not None and self.category not in record.category_tags:
            return False
        if self.rating_min > 0 and record.avg_rating < self.rating_min:
            return False
        if self.accepts_cod is not None and record.accepts_cod != self.accepts_cod:
            return False
        if self.has_offers is not None and record.has_offers != self.has_offers:
            return False
        if self.free_text and not matches_text(record, self.free_text):
            return False
        return True

    def within_radius(self, distance_km: float | None) -> bool:
        if not self.has_geo_constraint:
            return True
        return distance_km is not None and distance_km <= self.radius_km

    def matches(self, record: BusinessRecord) -> bool:
        return self.matches_attributes(record) and self.within_radius(self.distance_km(record))


VISIBLE_CORPUS = BusinessFilter()


def plan_filter(criteria: SearchCriteria) -> BusinessFilter:
    return BusinessFilter(
        origin=criteria.origin,
        radius_km=criteria.radius_km if criteria.origin is not None else None,
        category=criteria.category,
        rating_min=criteria.rating_min,
        accepts_cod=criteria.accepts_cod,
        has_offers=criteria.has_offers,
        free_text=criteria.free_text,
    )
