from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..schemas import BusinessSearchResult, CategoryCount

POPULAR_CATEGORY_LIMIT = 10


def sort_results(results: Sequence[BusinessSearchResult], sort_by: str) -> list[BusinessSearchResult]:
    """Stable sort; equal keys keep the order the repository returned them in."""
    if sort_by == "distance":
        return sorted(results, key=lambda item: (item.distance_km is None, item.distance_km or 0.0))
    if sort_by == "rating":
        return sorted(results, key=lambda item: item.avg_rating, reverse=True)
    if sort_by == "popularity":
        return sorted(results, key=lambda item: item.total_reviews, reverse=True)
    if sort_by == "newest":
        return sorted(results, key=lambda item: item.created_at, reverse=True)
    raise ValueError(f"Unknown sort key: {sort_by}")


def popular_categories(
    tag_lists: Iterable[Iterable[str]],
    limit: int = POPULAR_CATEGORY_LIMIT,
) -> list[CategoryCount]:
    counts: dict[str, int] = {}
    for tags in tag_lists:
        for tag in tags:
            counts[tag] = counts.get(tag, 0) + 1

    # dicts keep first-seen order and sorted() is stable, so ties stay in that order.
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [CategoryCount(category=category, count=count) for category, count in ranked[: max(0, limit)]]


@dataclass(frozen=True)
class Page:
    items: list[BusinessSearchResult]
    total_count: int
    offset: int
    limit: int

    @property
    def has_more(self) -> bool:
        return self.total_count > self.offset + self.limit


def paginate(items: Sequence[BusinessSearchResult], offset: int, limit: int) -> Page:
    start = max(0, offset)
    window = list(items[start : start + max(0, limit)])
    return Page(items=window, total_count=len(items), offset=offset, limit=limit)
