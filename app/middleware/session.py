"""Session refresh and admin gate, run ahead of every routed request."""
import logging
import re

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.settings import settings
from app.db import get_db
from app.models.profile import is_admin
from app.services.auth import (
    bearer_token,
    claims_need_refresh,
    create_session_cookie,
    provision_profile,
    verify_id_token,
    verify_session_cookie,
)

logger = logging.getLogger("app.session")

ADMIN_PREFIX = "/api/admin"
_SKIP_RE = re.compile(r"^/(locales|static|assets)/|^/favicon\.ico$|\.(svg|png|jpg|jpeg|gif|webp)$", re.IGNORECASE)


def is_admin_path(path: str) -> bool:
    return path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + "/")


def _cookie_max_age() -> int:
    return settings.session_cookie_days * 24 * 3600


def _load_profile(request: Request, claims: dict):
    """The caller's profile, read through the app's (possibly overridden) get_db."""
    db_factory = request.app.dependency_overrides.get(get_db, get_db)
    gen = db_factory()
    db = next(gen)
    try:
        return provision_profile(db, claims)
    finally:
        gen.close()


class SessionGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if _SKIP_RE.search(request.url.path):
            return await call_next(request)

        cookie_name = settings.session_cookie_name
        claims = None
        clear_cookie = False
        new_cookie = None

        cookie = request.cookies.get(cookie_name)
        if cookie:
            claims = await run_in_threadpool(verify_session_cookie, cookie)
            clear_cookie = claims is None

        token = bearer_token(request)
        if token:
            token_claims = await run_in_threadpool(verify_id_token, token)
            if token_claims:
                if claims is None or claims_need_refresh(claims):
                    new_cookie = await run_in_threadpool(create_session_cookie, token)
                claims = token_claims

        request.state.auth_claims = claims

        if is_admin_path(request.url.path):
            correlation_id = getattr(request.state, "correlation_id", "unknown")
            if not claims:
                logger.warning(f"[{correlation_id}] Unauthenticated admin request on {request.url.path}")
                return JSONResponse(status_code=401, content={"detail": "Unauthorized", "correlation_id": correlation_id})
            uid = claims.get("uid") or claims.get("user_id") or claims.get("sub")
            profile = await run_in_threadpool(_load_profile, request, claims) if uid else None
            if not is_admin(profile):
                logger.warning(f"[{correlation_id}] Non-admin {uid} denied on {request.url.path}")
                return JSONResponse(status_code=403, content={"detail": "Forbidden", "correlation_id": correlation_id})

        response = await call_next(request)

        if new_cookie:
            response.set_cookie(
                cookie_name,
                new_cookie,
                max_age=_cookie_max_age(),
                httponly=True,
                secure=settings.is_production,
                samesite="lax",
                path="/",
            )
        elif clear_cookie:
            response.delete_cookie(cookie_name, path="/")
        return response
