from datetime import datetime, UTC

from app.services.catalog import (
    filter_items,
    paginate,
    seeded_shuffle,
    sort_by_popularity,
    sort_items,
    timeline_in_months,
    with_scores,
)

ITEMS = [
    {"id": 1, "title": "Direct Elections", "description": "Elect the executive", "category": "Governance",
     "priority": "High", "timeline": "2 years", "created_at": "2025-01-10T00:00:00Z"},
    {"id": 2, "title": "Budget Portal", "description": "Open spending data", "category": "Transparency",
     "priority": "Low", "timeline": "180 days", "created_at": "2025-01-20T00:00:00Z"},
    {"id": 3, "title": "Health Posts", "description": "Nurse in every ward", "category": "Health",
     "priority": "Medium", "timeline": "5 years", "created_at": "2025-01-15T00:00:00Z",
     "problem_statement": "Rural clinics are unstaffed"},
    {"id": 4, "title": "Ten Year Plan", "description": "Long horizon", "category": "Governance",
     "priority": "Low", "timeline": "10 years", "created_at": "2025-01-01T00:00:00Z"},
]


def test_timeline_in_months():
    assert timeline_in_months("180 days") == 6
    assert timeline_in_months("6 months") == 6
    assert timeline_in_months("1 year") == 12
    assert timeline_in_months("18 months") == 18
    assert timeline_in_months("3 years") == 36
    assert timeline_in_months("5 years") == 60
    assert timeline_in_months("10 years") == 12
    assert timeline_in_months(None) == 12


def test_filter_search_is_case_insensitive_and_covers_problem_statement():
    assert [i["id"] for i in filter_items(ITEMS, search_query="ELECT")] == [1]
    assert [i["id"] for i in filter_items(ITEMS, search_query="rural")] == [3]


def test_filter_by_category_priority_and_timeline():
    assert [i["id"] for i in filter_items(ITEMS, categories=["Governance"])] == [1, 4]
    assert [i["id"] for i in filter_items(ITEMS, priorities=["Low"])] == [2, 4]
    assert [i["id"] for i in filter_items(ITEMS, timeline_range=(12, 36))] == [1, 4]
    # inclusive bounds
    assert [i["id"] for i in filter_items(ITEMS, timeline_range=(6, 6))] == [2]


def test_popularity_net_score_then_engagement():
    a, b = {"id": "a"}, {"id": "b"}
    ordered = sort_by_popularity([b, a], {"a": {"likes": 5, "dislikes": 1}, "b": {"likes": 3, "dislikes": 0}})
    assert ordered == [a, b]

    c, d = {"id": "c"}, {"id": "d"}
    # equal net score; more total votes first
    ordered = sort_by_popularity([c, d], {"c": {"likes": 1, "dislikes": 0}, "d": {"likes": 4, "dislikes": 3}})
    assert ordered == [d, c]


def test_popularity_reads_inline_counts_when_missing_from_map():
    items = [{"id": "x", "likes": 0, "dislikes": 2}, {"id": "y", "likes": 1, "dislikes": 0}]
    assert [i["id"] for i in sort_by_popularity(items)] == ["y", "x"]


def test_sort_items_variants():
    assert [i["id"] for i in sort_items(ITEMS, "newest")] == [2, 3, 1, 4]
    assert [i["id"] for i in sort_items(ITEMS, "oldest")] == [4, 1, 3, 2]
    assert [i["id"] for i in sort_items(ITEMS, "title")] == [2, 1, 3, 4]
    assert [i["category"] for i in sort_items(ITEMS, "category")] == [
        "Governance", "Governance", "Health", "Transparency"
    ]


def test_sort_newest_handles_datetimes():
    older = {"id": 1, "created_at": datetime(2024, 1, 1, tzinfo=UTC)}
    newer = {"id": 2, "created_at": datetime(2025, 1, 1, tzinfo=UTC)}
    assert sort_items([older, newer], "newest") == [newer, older]


def test_seeded_shuffle_is_deterministic_and_a_permutation():
    first = seeded_shuffle(ITEMS, 0.42)
    assert first == seeded_shuffle(ITEMS, 0.42)
    assert sorted(i["id"] for i in first) == [1, 2, 3, 4]
    assert seeded_shuffle([], 0.5) == []


def test_seeded_shuffle_matches_reference_order():
    # seed 0.5 -> index floor(500000 % m) for m = 4, 3, 2, 1
    assert seeded_shuffle(["a", "b", "c", "d"], 0.5) == ["b", "d", "c", "a"]


def test_paginate():
    window, meta = paginate(list(range(45)), page=3, page_size=20)
    assert window == list(range(40, 45))
    assert meta == {"page": 3, "limit": 20, "total": 45, "totalPages": 3}

    empty, meta = paginate([], page=1, page_size=20)
    assert empty == []
    assert meta["totalPages"] == 0


def test_with_scores_adds_derived_fields():
    scored = with_scores([{"id": 1, "title": "t"}], {"1": {"likes": 4, "dislikes": 1}})
    assert scored[0]["netScore"] == 3
    assert scored[0]["totalEngagement"] == 5
    assert scored[0]["title"] == "t"
