import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.core.settings import settings
from app.db import get_db
from app.exceptions import UnauthorizedException
from app.models.profile import Profile, role_of
from app.schemas.auth import SessionCreate, SessionOut
from app.services.auth import create_session_cookie, get_current_user, provision_profile, verify_id_token

logger = logging.getLogger("app.auth")

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/session", response_model=SessionOut)
def create_session(payload: SessionCreate, response: Response, db: Session = Depends(get_db)):
    """Exchange an ID token for an httpOnly session cookie."""
    claims = verify_id_token(payload.id_token)
    if not claims:
        raise UnauthorizedException("Invalid or expired token")

    cookie = create_session_cookie(payload.id_token)
    if not cookie:
        raise UnauthorizedException("Could not create session")

    profile = provision_profile(db, claims)
    response.set_cookie(
        settings.session_cookie_name,
        cookie,
        max_age=settings.session_cookie_days * 24 * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
    logger.info(f"Session created for {profile.id}")
    return SessionOut(status="ok", uid=profile.id, role=role_of(profile).value)


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"status": "logged_out"}


@router.get("/me", response_model=SessionOut)
def whoami(current_user: Profile = Depends(get_current_user)):
    return SessionOut(status="ok", uid=current_user.id, role=role_of(current_user).value)
