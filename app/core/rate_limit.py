"""In-memory sliding-window rate limiting.

Windows live in process memory and reset on restart; one instance serves
a single worker. Buckets keep unrelated limits (e.g. suggestion posts and
the global per-minute cap) from sharing counters.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from fastapi import Request

from app.core.settings import settings

MAX_TRACKED_KEYS = 10000


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: int = 0


class SlidingWindowRateLimiter:
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._hits: Dict[Tuple[str, str], List[float]] = {}
        self._lock = threading.Lock()

    def check(self, bucket: str, identifier: str, limit: int, window_seconds: float) -> RateLimitResult:
        """Record a hit for ``identifier`` unless it already used ``limit`` in the window."""
        now = self._clock()
        key = (bucket, identifier)
        with self._lock:
            hits = [t for t in self._hits.get(key, []) if now - t < window_seconds]
            if len(hits) >= limit:
                self._hits[key] = hits
                retry_after = int(window_seconds - (now - hits[0])) + 1
                return RateLimitResult(False, 0, retry_after)
            hits.append(now)
            self._hits[key] = hits
            if len(self._hits) > MAX_TRACKED_KEYS:
                self._evict(now, window_seconds)
            return RateLimitResult(True, limit - len(hits))

    def _evict(self, now: float, window_seconds: float) -> None:
        stale = [k for k, hits in self._hits.items() if not hits or now - hits[-1] >= window_seconds]
        for k in stale:
            del self._hits[k]

    def reset(self, bucket: Optional[str] = None) -> None:
        with self._lock:
            if bucket is None:
                self._hits.clear()
            else:
                for k in [k for k in self._hits if k[0] == bucket]:
                    del self._hits[k]


def client_ip(request: Request) -> str:
    """Caller IP.

    Forwarding headers are only read when ``TRUSTED_PROXY_COUNT`` proxies sit
    in front of the app; the entry appended by the outermost of them is the
    client. Anything to its left was sent by the client and is ignored.
    """
    hops = settings.trusted_proxy_count
    if hops > 0:
        forwarded = [p.strip() for p in request.headers.get("X-Forwarded-For", "").split(",") if p.strip()]
        if forwarded:
            return forwarded[-hops] if len(forwarded) >= hops else forwarded[0]
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()
    return request.client.host if request.client else "unknown"


rate_limiter = SlidingWindowRateLimiter()
