"""Keyed in-process query cache with stale and garbage-collection windows."""
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

DEFAULT_STALE_TIME = 5 * 60
DEFAULT_GC_TIME = 10 * 60


@dataclass
class CacheEntry:
    data: Any
    updated_at: float
    invalidated: bool = False


def _key(key) -> Tuple:
    return tuple(key) if isinstance(key, (list, tuple)) else (key,)


class QueryCache:
    """Data younger than ``stale_time`` is served as-is; entries idle past
    ``gc_time`` are dropped. Keys are tuples, so ``invalidate(("votes",))``
    clears every key that starts with ``"votes"``.
    """

    def __init__(self, stale_time: float = DEFAULT_STALE_TIME, gc_time: float = DEFAULT_GC_TIME,
                 clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self.gc_time = gc_time
        self._clock = clock
        self._entries: Dict[Tuple, CacheEntry] = {}
        self._lock = threading.Lock()

    def _collect(self, now: float) -> None:
        expired = [k for k, entry in self._entries.items() if now - entry.updated_at > self.gc_time]
        for k in expired:
            del self._entries[k]

    def get_query_data(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            self._collect(self._clock())
            entry = self._entries.get(_key(key))
            return entry.data if entry else None

    def is_stale(self, key: Hashable, stale_time: Optional[float] = None) -> bool:
        stale_time = self.stale_time if stale_time is None else stale_time
        with self._lock:
            entry = self._entries.get(_key(key))
            return entry is None or entry.invalidated or self._clock() - entry.updated_at >= stale_time

    def set_query_data(self, key: Hashable, data: Any) -> None:
        with self._lock:
            self._entries[_key(key)] = CacheEntry(data, self._clock())

    def fetch(self, key: Hashable, fn: Callable[[], Any], stale_time: Optional[float] = None) -> Any:
        """Cached data when fresh, else ``fn()`` stored under ``key``."""
        with self._lock:
            self._collect(self._clock())
        if not self.is_stale(key, stale_time):
            return self.get_query_data(key)
        data = fn()
        self.set_query_data(key, data)
        return data

    def invalidate(self, prefix: Hashable) -> int:
        prefix = _key(prefix)
        with self._lock:
            matched = [k for k in self._entries if k[:len(prefix)] == prefix]
            for k in matched:
                del self._entries[k]
        return len(matched)

    def mark_stale(self, prefix: Hashable) -> int:
        """Keep matching entries readable but refetch them on the next ``fetch``."""
        prefix = _key(prefix)
        with self._lock:
            matched = [k for k in self._entries if k[:len(prefix)] == prefix]
            for k in matched:
                self._entries[k].invalidated = True
        return len(matched)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
