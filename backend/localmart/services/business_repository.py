from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import Select, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import RepositoryError
from ..models import Business
from ..records import BusinessRecord
from .filter_service import BusinessFilter

logger = logging.getLogger(__name__)


class BusinessRepository(Protocol):
    """Read-only source of business snapshots.

    ``supports_spatial_index`` means ``find_by_filter`` already enforces the radius
    clause itself. Otherwise callers pass a filter without the geo constraint and
    apply the distance check to the returned superset.
    """

    supports_spatial_index: bool

    def find_by_filter(self, business_filter: BusinessFilter) -> list[BusinessRecord]: ...


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlBusinessRepository:
    supports_spatial_index = True

    def __init__(self, db: Session) -> None:
        self.db = db

    def _statement(self, business_filter: BusinessFilter) -> Select:
        stmt = select(Business).where(Business.is_approved.is_(True), Business.is_active.is_(True))

        if business_filter.rating_min > 0:
            stmt = stmt.where(Business.avg_rating >= business_filter.rating_min)
        if business_filter.accepts_cod is not None:
            stmt = stmt.where(Business.accepts_cod.is_(business_filter.accepts_cod))
        if business_filter.has_offers is not None:
            stmt = stmt.where(Business.has_offers.is_(business_filter.has_offers))
        if business_filter.free_text:
            pattern = f"%{_escape_like(business_filter.free_text)}%"
            stmt = stmt.where(
                or_(
                    Business.name.ilike(pattern, escape="\\"),
                    Business.description.ilike(pattern, escape="\\"),
                )
            )

        box = business_filter.bounding_box()
        if box is not None:
            min_lat, max_lat, min_lng, max_lng = box
            stmt = stmt.where(Business.lat.between(min_lat, max_lat), Business.lng.between(min_lng, max_lng))

        return stmt.order_by(Business.created_at.desc(), Business.id.asc())

    def find_by_filter(self, business_filter: BusinessFilter) -> list[BusinessRecord]:
        try:
            rows = self.db.execute(self._statement(business_filter)).scalars().all()
        except SQLAlchemyError as exc:
            logger.exception("Business lookup failed")
            raise RepositoryError("Business lookup failed") from exc

        # Category containment and the exact great-circle check are not portable SQL,
        # so they run over the bounding-box superset here.
        records = [BusinessRecord.from_model(row) for row in rows]
        return [record for record in records if business_filter.matches(record)]
