import logging
import time
from datetime import timedelta
from typing import Optional

from fastapi import Depends, Request
from firebase_admin import auth as firebase_auth
from sqlalchemy.orm import Session

from app.core.settings import settings
from app.db import get_db
from app.exceptions import ForbiddenException, UnauthorizedException
from app.models.profile import Profile, ProfileRole, is_admin, is_staff
from app.utils.datetime import utc_now

logger = logging.getLogger("app.auth")

# Test tokens for development; never honored in production
MOCK_TOKENS = {
    "mock-admin-token": ("admin-1", "Admin One", "admin@example.com", "admin"),
    "mock-moderator-token": ("moderator-1", "Moderator One", "moderator@example.com", "moderator"),
    "mock-user-token": ("user-1", "User One", "user@example.com", "user"),
    "mock-user2-token": ("user-2", "User Two", "user2@example.com", "user"),
}


def mock_tokens_enabled() -> bool:
    return not settings.is_production


def _mock_claims(token: str) -> Optional[dict]:
    if not mock_tokens_enabled() or token not in MOCK_TOKENS:
        return None
    uid, name, email, role = MOCK_TOKENS[token]
    return {"uid": uid, "name": name, "email": email, "role": role, "iat": int(time.time()), "mock": True}


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def verify_id_token(token: str) -> Optional[dict]:
    """Decode a bearer ID token, or None when it is invalid or auth is unavailable."""
    claims = _mock_claims(token)
    if claims:
        return claims
    try:
        return firebase_auth.verify_id_token(token)
    except Exception as e:
        logger.debug(f"ID token rejected: {type(e).__name__}")
        return None


def verify_session_cookie(cookie: str) -> Optional[dict]:
    claims = _mock_claims(cookie)
    if claims:
        return claims
    try:
        return firebase_auth.verify_session_cookie(cookie, check_revoked=True)
    except Exception as e:
        logger.debug(f"Session cookie rejected: {type(e).__name__}")
        return None


def create_session_cookie(id_token: str) -> Optional[str]:
    """Mint a session cookie value for a verified ID token."""
    if _mock_claims(id_token):
        # Mock sessions carry the mock token itself
        return id_token
    try:
        return firebase_auth.create_session_cookie(
            id_token, expires_in=timedelta(days=settings.session_cookie_days)
        )
    except Exception as e:
        logger.warning(f"Could not create session cookie: {e}")
        return None


def claims_need_refresh(claims: dict) -> bool:
    issued_at = claims.get("iat")
    if not issued_at:
        return True
    age_seconds = time.time() - float(issued_at)
    return age_seconds > settings.session_refresh_hours * 3600


def resolve_request_claims(request: Request) -> Optional[dict]:
    """Claims for the caller: those the session gate stored, else the bearer token."""
    claims = getattr(request.state, "auth_claims", None)
    if claims:
        return claims
    token = bearer_token(request)
    if token:
        return verify_id_token(token)
    cookie = request.cookies.get(settings.session_cookie_name)
    if cookie:
        return verify_session_cookie(cookie)
    return None


def _display_name(claims: dict) -> Optional[str]:
    if claims.get("name"):
        return claims["name"]
    given = claims.get("given_name", "")
    family = claims.get("family_name", "")
    full_name = (given + " " + family).strip()
    if full_name:
        return full_name
    email = claims.get("email")
    return email.split("@")[0].title() if email else None


def provision_profile(db: Session, claims: dict) -> Profile:
    """Fetch the caller's profile, creating it on first sight."""
    user_id = claims.get("uid") or claims.get("user_id") or claims.get("sub")
    if not user_id:
        raise UnauthorizedException("Invalid or expired token")

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile:
        return profile

    try:
        role = ProfileRole(claims.get("role", "user"))
    except ValueError:
        role = ProfileRole.user
    profile = Profile(
        id=user_id,
        email=claims.get("email"),
        display_name=_display_name(claims),
        role=role,
        created_at=utc_now(),
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info(f"Provisioned profile {user_id} with role {role.value}")
    return profile


def get_current_user_optional(request: Request, db: Session = Depends(get_db)) -> Optional[Profile]:
    claims = resolve_request_claims(request)
    if not claims:
        return None
    return provision_profile(db, claims)


def get_current_user(user: Optional[Profile] = Depends(get_current_user_optional)) -> Profile:
    if user is None:
        raise UnauthorizedException("User not authenticated")
    return user


def require_admin(user: Profile = Depends(get_current_user)) -> Profile:
    if not is_admin(user):
        raise ForbiddenException("Admin privileges required")
    return user


def require_staff(user: Profile = Depends(get_current_user)) -> Profile:
    if not is_staff(user):
        raise ForbiddenException("Moderators or admins only")
    return user
