import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.rate_limit import client_ip, rate_limiter

logger = logging.getLogger("app.rate_limit")

EXEMPT_PREFIXES = ("/health", "/ready", "/live", "/locales", "/static")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Global per-IP cap on requests per minute."""

    def __init__(self, app, calls_per_minute: int = 120):
        super().__init__(app)
        self.calls_per_minute = calls_per_minute

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(EXEMPT_PREFIXES):
            return await call_next(request)

        ip = client_ip(request)
        result = rate_limiter.check("global", ip, self.calls_per_minute, 60)
        if not result.allowed:
            correlation_id = getattr(request.state, "correlation_id", "unknown")
            logger.warning(f"[{correlation_id}] Rate limited {ip} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests. Please slow down.", "correlation_id": correlation_id},
                headers={"Retry-After": str(result.retry_after)},
            )
        return await call_next(request)
