from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..models import TelemetryLog
from .trace import RequestTrace

logger = logging.getLogger(__name__)

_METRIC_COLUMNS = {
    "avg_db_time_ms": TelemetryLog.db_time_ms,
    "avg_filtering_time_ms": TelemetryLog.filtering_time_ms,
    "avg_ranking_time_ms": TelemetryLog.ranking_time_ms,
    "avg_provider_time_ms": TelemetryLog.provider_time_ms,
    "avg_total_time_ms": TelemetryLog.total_time_ms,
}


def persist_trace(trace: RequestTrace) -> None:
    if not trace.active:
        return

    row = TelemetryLog(
        request_id=trace.request_id,
        path=trace.path,
        query_text=trace.query_text,
        db_time_ms=trace.stage_time("db"),
        filtering_time_ms=trace.stage_time("filtering"),
        ranking_time_ms=trace.stage_time("ranking"),
        provider_time_ms=trace.stage_time("provider"),
        total_time_ms=trace.total_time_ms,
        result_count=trace.result_count,
        total_match_count=trace.total_match_count,
        timestamp=trace.request_start_timestamp.replace(tzinfo=None),
    )

    try:
        with SessionLocal() as session:
            session.merge(row)
            session.commit()
    except Exception:
        logger.exception("Failed to persist telemetry trace", extra={"request_id": str(trace.request_id)})


def _to_float(value: float | None) -> float:
    if value is None:
        return 0.0
    return round(float(value), 3)


def fetch_average_latency_metrics(db: Session) -> dict[str, float | int]:
    stmt = select(
        func.count(TelemetryLog.request_id).label("sample_size"),
        *(func.avg(column).label(name) for name, column in _METRIC_COLUMNS.items()),
    )
    try:
        row = db.execute(stmt).one()
    except Exception:
        logger.exception("Failed to read telemetry metrics")
        return {"sample_size": 0, **{name: 0.0 for name in _METRIC_COLUMNS}}

    metrics: dict[str, float | int] = {"sample_size": int(row.sample_size or 0)}
    for name in _METRIC_COLUMNS:
        metrics[name] = _to_float(getattr(row, name))
    return metrics
