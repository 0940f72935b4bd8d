from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_record
from localmart.services.enrichment_service import enrich
from localmart.services.ranking_service import paginate, popular_categories, sort_results


def _result(index: int, *, distance_km=None, **overrides):
    return enrich(make_record(index, **overrides), distance_km=distance_km, is_currently_open=True)


def test_sort_by_distance_ascending():
    results = [_result(0, distance_km=3.0), _result(1, distance_km=0.5), _result(2, distance_km=1.5)]
    assert [item.id for item in sort_results(results, "distance")] == ["biz-1", "biz-2", "biz-0"]


def test_sort_by_rating_is_non_increasing_and_stable_on_ties():
    ratings = [4.0, 4.8, 4.0, 3.5, 4.8, 4.0]
    results = [_result(index, avg_rating=rating) for index, rating in enumerate(ratings)]

    ordered = sort_results(results, "rating")

    assert [item.avg_rating for item in ordered] == sorted(ratings, reverse=True)
    assert [item.id for item in ordered] == ["biz-1", "biz-4", "biz-0", "biz-2", "biz-5", "biz-3"]


def test_sort_by_popularity_uses_review_count():
    results = [_result(0, total_reviews=5), _result(1, total_reviews=50), _result(2, total_reviews=5)]
    assert [item.id for item in sort_results(results, "popularity")] == ["biz-1", "biz-0", "biz-2"]


def test_sort_by_newest_uses_created_at():
    base = datetime(2025, 6, 1, tzinfo=timezone.utc)
    results = [
        _result(0, created_at=base),
        _result(1, created_at=base + timedelta(days=2)),
        _result(2, created_at=base + timedelta(days=1)),
    ]
    assert [item.id for item in sort_results(results, "newest")] == ["biz-1", "biz-2", "biz-0"]


def test_sort_rejects_unknown_key():
    with pytest.raises(ValueError):
        sort_results([], "price")


def test_popular_categories_top_ten_with_first_seen_ties():
    tag_lists = [["food", "delivery"], ["beauty"], ["delivery"], ["food"], ["pets"]]
    tag_lists += [[f"cat-{index}"] for index in range(12)]

    categories = popular_categories(tag_lists)

    assert len(categories) == 10
    assert [(item.category, item.count) for item in categories[:4]] == [
        ("food", 2),
        ("delivery", 2),
        ("beauty", 1),
        ("pets", 1),
    ]
    assert [item.category for item in categories[4:]] == [f"cat-{index}" for index in range(6)]


def test_popular_categories_empty_corpus():
    assert popular_categories([]) == []


def test_paginate_reports_has_more():
    results = [_result(index) for index in range(45)]

    first = paginate(results, offset=0, limit=20)
    last = paginate(results, offset=40, limit=20)

    assert len(first.items) == 20 and first.has_more is True
    assert len(last.items) == 5 and last.has_more is False
    assert first.total_count == last.total_count == 45


def test_paginate_out_of_range_offset_returns_empty_page():
    page = paginate([_result(0)], offset=10, limit=20)
    assert page.items == []
    assert page.has_more is False
