import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class Business(Base):
    """Read-only view of the marketplace business table.

    Rows are written by the business-management service; discovery only selects from it.
    """

    __tablename__ = "businesses"
    __table_args__ = (
        CheckConstraint("avg_rating >= 0 AND avg_rating <= 5", name="ck_businesses_avg_rating_range"),
        CheckConstraint("total_reviews >= 0", name="ck_businesses_total_reviews_non_negative"),
        Index("ix_businesses_lat_lng", "lat", "lng"),
        Index("ix_businesses_visibility", "is_approved", "is_active"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_type: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    business_phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    operating_hours: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    realtime_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="offline",
        server_default=text("'offline'"),
    )
    avg_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accepts_cod: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_offers: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    commission_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    min_order_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    delivery_charge: Mapped[float | None] = mapped_column(Float, nullable=True)
    delivery_radius_km: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TelemetryLog(Base):
    __tablename__ = "telemetry_logs"

    request_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    path: Mapped[str | None] = mapped_column(Text, nullable=True)
    query_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    db_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    filtering_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    ranking_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    provider_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    result_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_match_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, server_default=func.now())
