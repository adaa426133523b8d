"""Batch vote lookups for list pages."""
import logging

from fastapi import APIRouter, Depends

from app.exceptions import ValidationException
from app.schemas.vote import BatchVoteRequest, BatchVoteResponse
from app.services.agenda_ids import resolve_agenda_uuids
from app.services.data_client import DataClient, get_user_client
from app.services.voting import MAX_BATCH_ITEMS, get_user_votes, get_vote_counts, vote_model_for

logger = logging.getLogger("app.votes")

router = APIRouter(prefix="/api/votes", tags=["Votes"])


@router.post("/batch", response_model=BatchVoteResponse)
def batch_votes(payload: BatchVoteRequest, client: DataClient = Depends(get_user_client)):
    """Counts and the caller's own votes for many items, keyed by the ids sent."""
    vote_model_for(payload.table)
    if len(payload.itemIds) > MAX_BATCH_ITEMS:
        raise ValidationException(f"At most {MAX_BATCH_ITEMS} items per request")
    if not payload.itemIds:
        return BatchVoteResponse(voteCounts={}, userVotes={})

    # Agenda votes are stored under resolved UUIDs; callers may send manifesto ids
    if payload.table == "agenda_votes":
        keys = {raw: key for raw, key in resolve_agenda_uuids(client, payload.itemIds).items() if key}
    else:
        keys = {raw: raw for raw in payload.itemIds}

    stored_ids = sorted(set(keys.values()))
    counts = get_vote_counts(client, payload.table, stored_ids)
    user_votes = get_user_votes(client, payload.table, stored_ids)
    logger.debug(f"Batch votes for {len(stored_ids)} items in {payload.table}")

    return BatchVoteResponse(
        voteCounts={raw: counts.get(key, {"likes": 0, "dislikes": 0}) for raw, key in keys.items()},
        userVotes={raw: user_votes[key] for raw, key in keys.items() if key in user_votes},
    )
