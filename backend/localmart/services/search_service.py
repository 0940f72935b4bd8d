from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..config import settings
from ..errors import RepositoryError
from ..records import BusinessRecord
from ..schemas import BusinessSearchResult, CategoryCount, SearchResponse
from ..telemetry import get_current_trace, instrument_stage
from .business_repository import BusinessRepository
from .criteria_service import SearchCriteria, build_search_criteria
from .enrichment_service import enrich
from .filter_service import VISIBLE_CORPUS, BusinessFilter, plan_filter
from .ranking_service import paginate, popular_categories, sort_results
from .time_service import Clock, open_now_status, system_clock

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    record: BusinessRecord
    distance_km: float | None


class SearchService:
    """Discovery search over a read-only business repository.

    One instance per request: the repository is bound to the request's session and
    nothing is cached between calls.
    """

    def __init__(
        self,
        repository: BusinessRepository,
        clock: Clock | None = None,
        *,
        default_radius_km: float = settings.default_radius_km,
        default_limit: int = settings.default_search_limit,
        max_limit: int = settings.max_search_limit,
        popular_category_limit: int = settings.popular_category_limit,
    ) -> None:
        self.repository = repository
        self.clock = clock or system_clock(settings.default_timezone)
        self.default_radius_km = default_radius_km
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.popular_category_limit = popular_category_limit

    @staticmethod
    def _current_request_id() -> str | None:
        trace = get_current_trace()
        if trace is None:
            return None
        return str(trace.request_id)

    @staticmethod
    def _record_trace_query(criteria: SearchCriteria) -> None:
        trace = get_current_trace()
        if trace is None:
            return
        trace.mark_query(criteria.free_text)

    @staticmethod
    def _record_trace_results(result_count: int, total_match_count: int) -> None:
        trace = get_current_trace()
        if trace is None:
            return
        trace.set_result_summary(result_count, total_match_count)

    def build_criteria(self, raw: Mapping[str, Any]) -> SearchCriteria:
        return build_search_criteria(
            raw,
            default_radius_km=self.default_radius_km,
            default_limit=self.default_limit,
            max_limit=self.max_limit,
        )

    def _find(self, business_filter: BusinessFilter) -> list[BusinessRecord]:
        try:
            return self.repository.find_by_filter(business_filter)
        except RepositoryError:
            raise
        except Exception as exc:
            logger.exception("Business repository failed")
            raise RepositoryError("Business repository failed") from exc

    @instrument_stage("db")
    def _collect_candidates(self, business_filter: BusinessFilter) -> tuple[list[Candidate], int]:
        if business_filter.has_geo_constraint and not self.repository.supports_spatial_index:
            records = self._find(business_filter.without_geo_constraint())
        else:
            records = self._find(business_filter)

        candidates: list[Candidate] = []
        filtered_by_distance = 0
        for record in records:
            distance_km = business_filter.distance_km(record)
            if not business_filter.within_radius(distance_km):
                filtered_by_distance += 1
                continue
            if not business_filter.matches_attributes(record):
                continue
            candidates.append(Candidate(record=record, distance_km=distance_km))
        return candidates, filtered_by_distance

    @instrument_stage("filtering")
    def _evaluate_candidates(self, candidates: list[Candidate], criteria: SearchCriteria) -> list[BusinessSearchResult]:
        now = self.clock()
        results: list[BusinessSearchResult] = []
        filtered_by_open_now = 0
        filtered_by_price_range = 0

        for candidate in candidates:
            record = candidate.record
            is_open, issue = open_now_status(record.operating_hours, record.realtime_status, now)
            if issue is not None:
                logger.warning("data-quality: business_id=%s schedule fallback to open: %s", record.id, issue)
            if criteria.open_now_only and not is_open:
                filtered_by_open_now += 1
                continue

            result = enrich(record, distance_km=candidate.distance_km, is_currently_open=is_open)
            if criteria.price_range is not None and result.price_range_category != criteria.price_range:
                filtered_by_price_range += 1
                continue
            results.append(result)

        if candidates:
            logger.info(
                "search_filtering: candidates=%s kept=%s filtered_open_now=%s filtered_price_range=%s",
                len(candidates),
                len(results),
                filtered_by_open_now,
                filtered_by_price_range,
            )
        return results

    @instrument_stage("ranking")
    def _rank(self, results: list[BusinessSearchResult], sort_by: str) -> list[BusinessSearchResult]:
        return sort_results(results, sort_by)

    @instrument_stage("db")
    def popular_categories(self) -> list[CategoryCount]:
        corpus = self._find(VISIBLE_CORPUS)
        return popular_categories(
            (record.category_tags for record in corpus if record.is_visible),
            limit=self.popular_category_limit,
        )

    def search(self, raw: Mapping[str, Any]) -> SearchResponse:
        criteria = self.build_criteria(raw)
        return self.search_criteria(criteria)

    def search_criteria(self, criteria: SearchCriteria) -> SearchResponse:
        self._record_trace_query(criteria)
        request_id = self._current_request_id()

        business_filter = plan_filter(criteria)
        candidates, filtered_by_distance = self._collect_candidates(business_filter)
        if filtered_by_distance:
            logger.info("search_filtering: filtered_distance=%s radius_km=%s", filtered_by_distance, criteria.radius_km)

        results = self._evaluate_candidates(candidates, criteria)
        ranked = self._rank(results, criteria.sort_by)
        page = paginate(ranked, criteria.offset, criteria.limit)
        categories = self.popular_categories()

        self._record_trace_results(len(page.items), page.total_count)
        return SearchResponse(
            results=page.items,
            total_count=page.total_count,
            popular_categories=categories,
            has_more=page.has_more,
            sort_by=criteria.sort_by,
            limit=criteria.limit,
            offset=criteria.offset,
            request_id=request_id,
        )
