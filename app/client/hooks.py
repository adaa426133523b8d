"""Cached data accessors and optimistic voting state for API consumers."""
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Optional

from app.client.api import ApiError, ReformsApiClient
from app.client.cache import QueryCache
from app.services.voting import apply_vote_toggle, empty_counts

logger = logging.getLogger("app.client")

LOGIN_REQUIRED = "login_required"
FOREVER = float("inf")


class QueryResult:
    """Outcome of a cached read. ``refetch()`` bypasses the cache."""

    def __init__(self, cache: QueryCache, key: Hashable, fn: Callable[[], Any],
                 stale_time: Optional[float] = None, default: Any = None):
        self._cache = cache
        self._key = key
        self._fn = fn
        self._stale_time = stale_time
        self._default = default
        self.data: Any = default
        self.error: Optional[ApiError] = None
        self.is_loading = False
        self._load(force=False)

    def _load(self, force: bool) -> None:
        self.is_loading = True
        try:
            if force:
                self._cache.invalidate(self._key)
            self.data = self._cache.fetch(self._key, self._fn, self._stale_time)
            self.error = None
        except ApiError as e:
            logger.warning(f"Query {self._key} failed: {e}")
            self.error = e
            if self.data is None:
                self.data = self._default
        finally:
            self.is_loading = False

    def refetch(self) -> "QueryResult":
        self._load(force=True)
        return self

    def dismiss_error(self) -> None:
        self.error = None


def use_manifesto_data(api: ReformsApiClient, cache: QueryCache, lang: str = "en") -> QueryResult:
    # Bundle contents only change on deploy
    return QueryResult(cache, ("manifesto", lang), lambda: api.list_manifesto(lang=lang)["items"],
                       stale_time=FOREVER, default=[])


def use_suggestions(api: ReformsApiClient, cache: QueryCache, agenda_id: str) -> QueryResult:
    return QueryResult(cache, ("suggestions", agenda_id),
                       lambda: api.list_suggestions(agenda_id)["suggestions"],
                       stale_time=60, default=[])


def use_testimonials(api: ReformsApiClient, cache: QueryCache, limit: int = 50) -> QueryResult:
    return QueryResult(cache, ("testimonials", limit), lambda: api.list_testimonials(limit=limit),
                       stale_time=5 * 60, default=[])


def submit_suggestion(api: ReformsApiClient, cache: QueryCache, agenda_id: str,
                      content: str, author_name: str) -> dict:
    """Post a suggestion; an approved one is shown immediately, then the feed is refreshed."""
    result = api.create_suggestion(agenda_id, content, author_name)
    if result.get("autoApproved"):
        existing = cache.get_query_data(("suggestions", agenda_id)) or []
        cache.set_query_data(("suggestions", agenda_id), [result["suggestion"], *existing])
    cache.mark_stale(("suggestions",))
    return result


@dataclass
class VoteSnapshot:
    counts: Dict[str, Dict[str, int]] = field(default_factory=dict)
    user_votes: Dict[str, Optional[str]] = field(default_factory=dict)


class VotingState:
    """Vote counts and the caller's votes for a page of items.

    ``handle_vote`` updates locally first, then reconciles with the server
    answer or rolls back on failure.
    """

    def __init__(self, api: ReformsApiClient, table: str, item_ids: List[str]):
        self.api = api
        self.table = table
        self.item_ids = list(item_ids)
        self.state = VoteSnapshot()
        self.error: Optional[str] = None
        self.is_loading = False
        self.pending: set = set()

    def load(self) -> "VotingState":
        if not self.item_ids:
            return self
        self.is_loading = True
        try:
            data = self.api.batch_votes(self.table, self.item_ids)
            self.state = VoteSnapshot(
                counts={i: dict(data["voteCounts"].get(i, empty_counts())) for i in self.item_ids},
                user_votes=dict(data.get("userVotes", {})),
            )
            self.error = None
        except ApiError as e:
            logger.warning(f"Failed to load votes for {self.table}: {e}")
            self.error = str(e.detail)
        finally:
            self.is_loading = False
        return self

    def counts(self, item_id: str) -> Dict[str, int]:
        return self.state.counts.get(item_id, empty_counts())

    def user_vote(self, item_id: str) -> Optional[str]:
        return self.state.user_votes.get(item_id)

    def handle_vote(self, item_id: str, vote_type: str) -> bool:
        """Returns True when the server accepted the vote."""
        if not self.api.is_authenticated:
            self.error = LOGIN_REQUIRED
            return False
        if item_id in self.pending:
            return False

        previous = copy.deepcopy(self.state)
        new_vote, new_counts = apply_vote_toggle(self.user_vote(item_id), self.counts(item_id), vote_type)
        self.state.counts[item_id] = new_counts
        self.state.user_votes[item_id] = new_vote

        self.pending.add(item_id)
        try:
            result = self.api.vote(self.table, item_id, vote_type)
        except ApiError as e:
            logger.warning(f"Vote on {item_id} failed; rolling back: {e}")
            self.state = previous
            self.error = LOGIN_REQUIRED if e.status_code == 401 else str(e.detail)
            return False
        finally:
            self.pending.discard(item_id)

        self.state.counts[item_id] = {"likes": result["likes"], "dislikes": result["dislikes"]}
        self.state.user_votes[item_id] = result.get("userVote")
        self.error = None
        return True

    def dismiss_error(self) -> None:
        self.error = None
