"""Filtering, ordering and pagination over already-loaded catalog items.

Items may be dicts (locale bundles, API payloads) or objects (ORM rows);
fields are read with :func:`_field` either way. Nothing here touches the
database.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

TIMELINE_MONTHS = {
    "180 days": 6,
    "6 months": 6,
    "1 year": 12,
    "18 months": 18,
    "2 years": 24,
    "3 years": 36,
    "5 years": 60,
}
DEFAULT_TIMELINE_MONTHS = 12
DEFAULT_TIMELINE_RANGE = (6, 60)

SEARCH_FIELDS = ("title", "description", "category", "problem_statement")
SORT_OPTIONS = ("popularity", "newest", "oldest", "title", "category")


def _field(item: Any, name: str, default: Any = None) -> Any:
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def _timestamp(item: Any) -> float:
    value = _field(item, "created_at")
    if value is None:
        return 0.0
    if isinstance(value, datetime):
        return value.timestamp()
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).timestamp()
    except ValueError:
        return 0.0


def timeline_in_months(timeline: Optional[str]) -> int:
    return TIMELINE_MONTHS.get(timeline or "", DEFAULT_TIMELINE_MONTHS)


def matches_search(item: Any, query: str) -> bool:
    needle = query.lower()
    for name in SEARCH_FIELDS:
        value = _field(item, name)
        if isinstance(value, str) and needle in value.lower():
            return True
    return False


def filter_items(
    items: Iterable[Any],
    search_query: str = "",
    categories: Sequence[str] = (),
    priorities: Sequence[str] = (),
    timeline_range: Tuple[int, int] = DEFAULT_TIMELINE_RANGE,
) -> List[Any]:
    low, high = timeline_range
    query = (search_query or "").strip()
    result = []
    for item in items:
        if query and not matches_search(item, query):
            continue
        if categories and _field(item, "category") not in categories:
            continue
        if priorities and _field(item, "priority") not in priorities:
            continue
        months = timeline_in_months(_field(item, "timeline"))
        if months < low or months > high:
            continue
        result.append(item)
    return result


def _counts_for(item: Any, vote_counts: Dict[str, Dict[str, int]]) -> Tuple[int, int]:
    counts = vote_counts.get(str(_field(item, "id")), None)
    if counts is None:
        return _field(item, "likes", 0) or 0, _field(item, "dislikes", 0) or 0
    return counts.get("likes", 0), counts.get("dislikes", 0)


def net_score(likes: int, dislikes: int) -> int:
    return likes - dislikes


def sort_by_popularity(items: Iterable[Any], vote_counts: Optional[Dict[str, Dict[str, int]]] = None) -> List[Any]:
    """Highest net score first; ties go to the item with more total votes."""
    vote_counts = vote_counts or {}

    def key(item):
        likes, dislikes = _counts_for(item, vote_counts)
        return (-net_score(likes, dislikes), -(likes + dislikes))

    return sorted(items, key=key)


def sort_items(items: Iterable[Any], sort_by: str = "popularity",
               vote_counts: Optional[Dict[str, Dict[str, int]]] = None) -> List[Any]:
    items = list(items)
    if sort_by == "popularity":
        return sort_by_popularity(items, vote_counts)
    if sort_by == "newest":
        return sorted(items, key=_timestamp, reverse=True)
    if sort_by == "oldest":
        return sorted(items, key=_timestamp)
    if sort_by == "title":
        return sorted(items, key=lambda i: (_field(i, "title") or "").lower())
    if sort_by == "category":
        return sorted(items, key=lambda i: (_field(i, "category") or "").lower())
    return items


def seeded_shuffle(items: Sequence[Any], seed: float) -> List[Any]:
    """Fisher-Yates driven by a fixed seed in [0, 1); same seed, same order."""
    shuffled = list(items)
    m = len(shuffled)
    while m:
        i = math.floor((seed * 1000000) % m)
        m -= 1
        shuffled[m], shuffled[i] = shuffled[i], shuffled[m]
    return shuffled


def paginate(items: Sequence[Any], page: int = 1, page_size: int = 20) -> Tuple[List[Any], dict]:
    total = len(items)
    page = max(page, 1)
    page_size = max(page_size, 1)
    start = (page - 1) * page_size
    window = list(items[start:start + page_size])
    return window, {
        "page": page,
        "limit": page_size,
        "total": total,
        "totalPages": math.ceil(total / page_size),
    }


def with_scores(items: Iterable[Any], vote_counts: Dict[str, Dict[str, int]]) -> List[dict]:
    """Dict copies of ``items`` carrying likes, dislikes, netScore and totalEngagement."""
    scored = []
    for item in items:
        data = dict(item) if isinstance(item, dict) else dict(vars(item))
        data.pop("_sa_instance_state", None)
        likes, dislikes = _counts_for(item, vote_counts)
        data.update(
            likes=likes,
            dislikes=dislikes,
            netScore=net_score(likes, dislikes),
            totalEngagement=likes + dislikes,
        )
        scored.append(data)
    return scored
