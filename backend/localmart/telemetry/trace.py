from __future__ import annotations

import json
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import perf_counter
from uuid import UUID, uuid4

STAGES = ("db", "filtering", "ranking", "provider")
SEARCH_REQUIRED_STAGES = ("db", "filtering", "ranking")

_TRACE_CONTEXT: ContextVar["RequestTrace | None"] = ContextVar("request_trace", default=None)


def _round_or_none(value: float | None) -> float | None:
    if value is None:
        return None
    return round(value, 3)


@dataclass
class RequestTrace:
    request_id: UUID = field(default_factory=uuid4)
    path: str = ""
    method: str = "GET"
    request_start_timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    query_text: str | None = None
    stage_times_ms: dict[str, float] = field(default_factory=dict)
    total_time_ms: float | None = None
    result_count: int | None = None
    total_match_count: int | None = None
    search_active: bool = False
    _request_perf_counter_start: float = field(default_factory=perf_counter, repr=False)

    @property
    def active(self) -> bool:
        return self.search_active or "provider" in self.stage_times_ms

    def mark_query(self, query_text: str | None) -> None:
        self.query_text = (query_text or "").strip()
        self.search_active = True

    def record_stage_time(self, stage: str, duration_ms: float) -> None:
        self.stage_times_ms[stage] = self.stage_times_ms.get(stage, 0.0) + duration_ms

    def stage_time(self, stage: str) -> float | None:
        return self.stage_times_ms.get(stage)

    def set_result_summary(self, result_count: int, total_match_count: int) -> None:
        self.result_count = result_count
        self.total_match_count = total_match_count

    def finalize(self) -> None:
        if self.total_time_ms is None:
            self.total_time_ms = (perf_counter() - self._request_perf_counter_start) * 1000.0

        if self.search_active:
            if self.result_count is None:
                self.result_count = 0
            if self.total_match_count is None:
                self.total_match_count = 0

    def summary_fields(self) -> dict[str, object]:
        fields: dict[str, object] = {"request_id": str(self.request_id)}
        for stage in STAGES:
            fields[f"{stage}_time_ms"] = _round_or_none(self.stage_time(stage))
        fields["total_time_ms"] = _round_or_none(self.total_time_ms)
        fields["result_count"] = self.result_count
        fields["total_match_count"] = self.total_match_count
        return fields

    def to_header_value(self) -> str:
        return json.dumps(self.summary_fields(), separators=(",", ":"))

    def missing_required_stages(self) -> list[str]:
        if not self.search_active:
            return []
        return [stage for stage in SEARCH_REQUIRED_STAGES if stage not in self.stage_times_ms]


def get_current_trace() -> RequestTrace | None:
    return _TRACE_CONTEXT.get()


def set_current_trace(trace: RequestTrace) -> Token:
    return _TRACE_CONTEXT.set(trace)


def reset_current_trace(token: Token) -> None:
    _TRACE_CONTEXT.reset(token)
