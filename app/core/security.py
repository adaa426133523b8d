"""Request origin checks for state-changing browser calls."""
from urllib.parse import urlparse

from fastapi import Request

from app.core.settings import settings


def _origin_of(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}".lower()


def is_allowed_origin(request: Request) -> bool:
    """Accept same-site browser requests and non-browser callers.

    Browsers send ``Origin`` on cross-origin POSTs; a request with neither
    ``Origin`` nor ``Referer`` comes from a server-side or CLI client.
    """
    origin = request.headers.get("Origin") or ""
    if not origin:
        referer = request.headers.get("Referer") or ""
        if not referer:
            return True
        origin = _origin_of(referer)
    else:
        origin = origin.rstrip("/").lower()

    if "*" in settings.cors_origins and not settings.is_production:
        return True
    allowed = {_origin_of(o) or o.lower() for o in settings.allowed_origins}
    own = _origin_of(str(request.base_url))
    return origin in allowed or origin == own
