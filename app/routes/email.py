"""Internal email endpoint for server-side callers holding the shared key."""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Header

from app.core.settings import settings
from app.exceptions import ForbiddenException
from app.schemas.notification import EmailRequest
from app.services import email as email_service

logger = logging.getLogger("app.email")

router = APIRouter(prefix="/api", tags=["Email"])


def _key_matches(provided: Optional[str]) -> bool:
    expected = settings.email_internal_secret
    if not expected or not provided:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


@router.post("/send-email")
def send_email(
    payload: EmailRequest,
    x_internal_email_key: Optional[str] = Header(None),
):
    if not _key_matches(x_internal_email_key):
        logger.warning("Rejected send-email call with missing or wrong internal key")
        raise ForbiddenException("Forbidden")

    sent = email_service.send_suggestion_notification(
        payload.data.author_name,
        payload.data.content,
        payload.data.agenda_title,
    )
    return {"success": sent}
