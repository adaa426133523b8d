"""
Manifesto catalog served from the locale bundles.
Votes are joined in from agenda_votes so the list can be ordered by popularity.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.exceptions import NotFoundException, ValidationException
from app.services.agenda_ids import resolve_agenda_uuids
from app.services.catalog import (
    DEFAULT_TIMELINE_RANGE, SORT_OPTIONS, filter_items, seeded_shuffle, sort_items, with_scores
)
from app.services.data_client import DataClient, get_user_client
from app.services.i18n import TranslationStore, get_translation_store
from app.services.voting import get_vote_counts

logger = logging.getLogger("app.manifesto")

router = APIRouter(prefix="/api/manifesto", tags=["Manifesto"])


def _split(values: Optional[List[str]]) -> List[str]:
    # Accept both ?category=a&category=b and ?category=a,b
    result = []
    for value in values or []:
        result.extend(v.strip() for v in value.split(",") if v.strip())
    return result


def _agenda_vote_counts(client: DataClient, items: List[dict]) -> dict:
    """Counts keyed by the catalog item's own id."""
    raw_ids = [str(item.get("id")) for item in items if item.get("id") is not None]
    if not raw_ids:
        return {}
    keys = {raw: key for raw, key in resolve_agenda_uuids(client, raw_ids).items() if key}
    counts = get_vote_counts(client, "agenda_votes", sorted(set(keys.values())))
    return {raw: counts.get(key, {"likes": 0, "dislikes": 0}) for raw, key in keys.items()}


@router.get("")
def list_manifesto(
    lang: str = Query("en"),
    q: str = Query(""),
    category: Optional[List[str]] = Query(None),
    priority: Optional[List[str]] = Query(None),
    timeline_min: int = Query(DEFAULT_TIMELINE_RANGE[0], ge=0),
    timeline_max: int = Query(DEFAULT_TIMELINE_RANGE[1], ge=0),
    sort: Optional[str] = Query(None),
    seed: Optional[float] = Query(None, ge=0, lt=1),
    client: DataClient = Depends(get_user_client),
    store: TranslationStore = Depends(get_translation_store),
):
    """Filtered catalog; ``sort`` wins over ``seed``, neither keeps bundle order."""
    if sort and sort not in SORT_OPTIONS:
        raise ValidationException(f"sort must be one of: {', '.join(SORT_OPTIONS)}")
    if timeline_min > timeline_max:
        raise ValidationException("timeline_min must not exceed timeline_max")

    language = store.resolve_language(lang)
    items = store.load_manifesto_summary(language)
    filtered = filter_items(
        items,
        search_query=q,
        categories=_split(category),
        priorities=_split(priority),
        timeline_range=(timeline_min, timeline_max),
    )
    vote_counts = _agenda_vote_counts(client, filtered)

    if sort:
        ordered = sort_items(filtered, sort, vote_counts)
    elif seed is not None:
        ordered = seeded_shuffle(filtered, seed)
    else:
        ordered = filtered

    return {
        "lang": language,
        "total": len(items),
        "count": len(ordered),
        "items": with_scores(ordered, vote_counts),
    }


@router.get("/{item_id}")
def get_manifesto_item(
    item_id: str,
    lang: str = Query("en"),
    store: TranslationStore = Depends(get_translation_store),
):
    """Summary fields merged with the per-agenda detail bundle."""
    language = store.resolve_language(lang)
    summary = next(
        (item for item in store.load_manifesto_summary(language) if str(item.get("id")) == item_id),
        None,
    )
    detail = store.load_agenda_detail(language, item_id) if item_id.isdigit() else None
    if summary is None and detail is None:
        raise NotFoundException("Agenda not found")

    combined = dict(summary or {})
    combined.update(detail or {})
    return {"lang": language, "item": combined}
