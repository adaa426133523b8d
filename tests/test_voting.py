import pytest

from app.exceptions import UnauthorizedException, ValidationException
from app.models.vote import SuggestionVote
from app.services.data_client import service_client, user_client
from app.services.voting import (
    aggregate_vote_counts,
    apply_vote_toggle,
    cast_vote,
    get_user_votes,
    get_vote_counts,
    vote_model_for,
)


def test_toggle_from_no_vote():
    vote, counts = apply_vote_toggle(None, {"likes": 2, "dislikes": 1}, "like")
    assert vote == "like"
    assert counts == {"likes": 3, "dislikes": 1}


def test_toggle_same_type_clears():
    vote, counts = apply_vote_toggle(None, {"likes": 0, "dislikes": 0}, "like")
    vote, counts = apply_vote_toggle(vote, counts, "like")
    assert vote is None
    assert counts == {"likes": 0, "dislikes": 0}


def test_toggle_switch_moves_count():
    vote, counts = apply_vote_toggle("like", {"likes": 1, "dislikes": 0}, "dislike")
    assert vote == "dislike"
    assert counts == {"likes": 0, "dislikes": 1}


def test_toggle_never_negative():
    vote, counts = apply_vote_toggle("dislike", {"likes": 0, "dislikes": 0}, "dislike")
    assert vote is None
    assert counts["dislikes"] == 0


def test_aggregate_vote_counts_mixed_rows():
    rows = [
        {"item_id": "a", "vote_type": "like"},
        {"item_id": "a", "vote_type": "like"},
        SuggestionVote(item_id="a", user_id="u", vote_type="dislike"),
        {"item_id": "b", "vote_type": "dislike"},
    ]
    assert aggregate_vote_counts(rows) == {
        "a": {"likes": 2, "dislikes": 1},
        "b": {"likes": 0, "dislikes": 1},
    }


def test_vote_model_for_rejects_unknown_table():
    with pytest.raises(ValidationException):
        vote_model_for("votes")


def test_cast_vote_requires_profile(db_session):
    with pytest.raises(UnauthorizedException):
        cast_vote(user_client(db_session, None), "agenda_votes", "item-1", "like")


def test_cast_vote_rejects_bad_type(db_session, make_profile):
    profile = make_profile("voter-1")
    with pytest.raises(ValidationException):
        cast_vote(user_client(db_session, profile), "agenda_votes", "item-1", "love")


def test_cast_vote_toggle_cycle(db_session, make_profile):
    client = user_client(db_session, make_profile("voter-1"))

    assert cast_vote(client, "agenda_votes", "item-1", "like") == {"likes": 1, "dislikes": 0, "userVote": "like"}
    assert cast_vote(client, "agenda_votes", "item-1", "dislike") == {"likes": 0, "dislikes": 1, "userVote": "dislike"}
    assert cast_vote(client, "agenda_votes", "item-1", "dislike") == {"likes": 0, "dislikes": 0, "userVote": None}


def test_counts_and_user_votes_across_users(db_session, make_profile):
    alice = user_client(db_session, make_profile("alice"))
    bob = user_client(db_session, make_profile("bob"))
    cast_vote(alice, "suggestion_votes", "s1", "like")
    cast_vote(bob, "suggestion_votes", "s1", "like")
    cast_vote(bob, "suggestion_votes", "s2", "dislike")

    counts = get_vote_counts(service_client(db_session), "suggestion_votes", ["s1", "s2", "s3"])
    assert counts == {
        "s1": {"likes": 2, "dislikes": 0},
        "s2": {"likes": 0, "dislikes": 1},
        "s3": {"likes": 0, "dislikes": 0},
    }
    assert get_user_votes(bob, "suggestion_votes", ["s1", "s2"]) == {"s1": "like", "s2": "dislike"}
    assert get_user_votes(user_client(db_session, None), "suggestion_votes", ["s1"]) == {}
