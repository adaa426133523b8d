"""Like/dislike voting for agendas and suggestions.

One active vote per user per item. Voting the same type again clears the
vote; voting the other type switches it.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional

from sqlalchemy import func

from app.exceptions import UnauthorizedException, ValidationException
from app.models.vote import VOTE_TABLES, VOTE_TYPES
from app.services import audit


MAX_BATCH_ITEMS = 200


def empty_counts() -> Dict[str, int]:
    return {"likes": 0, "dislikes": 0}


def vote_model_for(table: str):
    model = VOTE_TABLES.get(table)
    if model is None:
        raise ValidationException(f"Invalid vote table. Expected one of: {', '.join(VOTE_TABLES)}")
    return model


def validate_vote_type(vote_type: Optional[str]) -> str:
    if vote_type not in VOTE_TYPES:
        raise ValidationException("vote_type must be 'like' or 'dislike'")
    return vote_type


def apply_vote_toggle(current_vote: Optional[str], counts: Dict[str, int], vote_type: str):
    """Return ``(new_vote, new_counts)`` after clicking ``vote_type``.

    Pure; used for optimistic updates on the client and mirrored by
    ``cast_vote`` on the server.
    """
    likes = counts.get("likes", 0)
    dislikes = counts.get("dislikes", 0)

    if current_vote == vote_type:
        new_vote = None
        if vote_type == "like":
            likes -= 1
        else:
            dislikes -= 1
    else:
        new_vote = vote_type
        if current_vote == "like":
            likes -= 1
        elif current_vote == "dislike":
            dislikes -= 1
        if vote_type == "like":
            likes += 1
        else:
            dislikes += 1

    return new_vote, {"likes": max(0, likes), "dislikes": max(0, dislikes)}


def aggregate_vote_counts(votes: Iterable) -> Dict[str, Dict[str, int]]:
    """Tally ``{item_id: {likes, dislikes}}`` from vote rows or dicts."""
    tally: Dict[str, Dict[str, int]] = {}
    for vote in votes:
        item_id = vote["item_id"] if isinstance(vote, dict) else vote.item_id
        vote_type = vote["vote_type"] if isinstance(vote, dict) else vote.vote_type
        current = tally.setdefault(item_id, empty_counts())
        if vote_type == "like":
            current["likes"] += 1
        elif vote_type == "dislike":
            current["dislikes"] += 1
    return tally


def get_vote_counts(client, table: str, item_ids: list[str]) -> Dict[str, Dict[str, int]]:
    model = vote_model_for(table)
    counts = {item_id: empty_counts() for item_id in item_ids}
    if not item_ids:
        return counts
    rows = (
        client.query(model, model.item_id, model.vote_type, func.count(model.id))
        .filter(model.item_id.in_(item_ids))
        .group_by(model.item_id, model.vote_type)
        .all()
    )
    for item_id, vote_type, n in rows:
        key = "likes" if vote_type == "like" else "dislikes"
        counts.setdefault(item_id, empty_counts())[key] = n
    return counts


def get_user_votes(client, table: str, item_ids: list[str]) -> Dict[str, str]:
    model = vote_model_for(table)
    if client.user_id is None or not item_ids:
        return {}
    rows = (
        client.query(model, model.item_id, model.vote_type)
        .filter(model.item_id.in_(item_ids), model.user_id == client.user_id)
        .all()
    )
    return {item_id: vote_type for item_id, vote_type in rows}


def cast_vote(client, table: str, item_id: str, vote_type: str) -> dict:
    """Toggle the caller's vote on ``item_id`` and return fresh totals."""
    model = vote_model_for(table)
    validate_vote_type(vote_type)
    if client.user_id is None:
        raise UnauthorizedException("User not authenticated")

    existing = (
        client.query(model)
        .filter(model.item_id == item_id, model.user_id == client.user_id)
        .first()
    )
    if existing and existing.vote_type == vote_type:
        client.delete(existing, commit=False)
        user_vote = None
    elif existing:
        existing.vote_type = vote_type
        user_vote = vote_type
    else:
        client.add(model(item_id=item_id, user_id=client.user_id, vote_type=vote_type), commit=False)
        user_vote = vote_type
    client.commit()

    counts = get_vote_counts(client, table, [item_id])[item_id]
    audit.log_vote(client.user_id, table, item_id, user_vote)
    return {"likes": counts["likes"], "dislikes": counts["dislikes"], "userVote": user_vote}
