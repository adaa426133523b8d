"""
Public suggestion feed and submission.
Spam prevention is an origin check plus a per-IP rate limit ahead of auth.
"""
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from sqlalchemy.exc import SQLAlchemyError

from app.core.rate_limit import client_ip, rate_limiter
from app.core.security import is_allowed_origin
from app.exceptions import (
    ForbiddenException, NotFoundException, RateLimitException,
    UnauthorizedException, ValidationException
)
from app.models.agenda import Agenda
from app.models.suggestion import Suggestion, SuggestionStatus
from app.models.profile import Profile
from app.schemas.suggestion import SuggestionCreate, SuggestionCreated, SuggestionFeed, SuggestionOut, SuggestionPublic
from app.schemas.vote import VoteRequest, VoteResult
from app.services import audit, moderation
from app.services import email as email_service
from app.services.agenda_ids import validate_and_normalize_agenda_id, validate_suggestion_uuid
from app.services.auth import get_current_user
from app.services.data_client import DataClient, get_user_client
from app.services.voting import cast_vote

logger = logging.getLogger("app.suggestions")

router = APIRouter(prefix="/api/suggestions", tags=["Suggestions"])

RATE_LIMIT_BUCKET = "suggestion-create"
RATE_LIMIT_MAX_REQUESTS = 5  # per IP
RATE_LIMIT_WINDOW_SECONDS = 10 * 60
NO_STORE = "no-cache, no-store, must-revalidate"
UNKNOWN_AGENDA = "Unknown Agenda"


def _agenda_title(client: DataClient, agenda_uuid: str) -> str:
    try:
        agenda = client.query(Agenda).filter(Agenda.id == agenda_uuid).first()
    except SQLAlchemyError as e:
        logger.warning(f"Could not load agenda title for {agenda_uuid}: {e}")
        return UNKNOWN_AGENDA
    return agenda.title if agenda and agenda.title else UNKNOWN_AGENDA


@router.get("", response_model=SuggestionFeed)
def list_suggestions(
    response: Response,
    agenda_id: Optional[str] = Query(None),
    client: DataClient = Depends(get_user_client),
):
    """Approved suggestions for one agenda, newest first."""
    if not agenda_id:
        raise ValidationException("agenda_id is required")

    resolution = validate_and_normalize_agenda_id(client, agenda_id)
    if not resolution.is_valid or not resolution.agenda_uuid:
        raise ValidationException(resolution.error or "Invalid agenda ID")

    rows = (
        client.query(Suggestion)
        .filter(
            Suggestion.agenda_id == resolution.agenda_uuid,
            Suggestion.status == SuggestionStatus.approved,
        )
        .order_by(Suggestion.created_at.desc())
        .all()
    )
    response.headers["Cache-Control"] = NO_STORE
    return SuggestionFeed(
        suggestions=[SuggestionPublic.model_validate(row) for row in rows],
        agenda_id=resolution.agenda_uuid,
    )


@router.post("", response_model=SuggestionCreated)
def create_suggestion(
    request: Request,
    background_tasks: BackgroundTasks,
    payload: Optional[SuggestionCreate] = None,
    client: DataClient = Depends(get_user_client),
):
    if not is_allowed_origin(request):
        logger.warning(f"Rejected suggestion from origin {request.headers.get('Origin')}")
        raise ForbiddenException("Invalid origin")

    ip = client_ip(request)
    limit = rate_limiter.check(RATE_LIMIT_BUCKET, ip, RATE_LIMIT_MAX_REQUESTS, RATE_LIMIT_WINDOW_SECONDS)
    if not limit.allowed:
        logger.warning(f"Suggestion rate limit exceeded for {ip}")
        raise RateLimitException(retry_after=limit.retry_after)

    user: Optional[Profile] = client.profile
    if user is None:
        raise UnauthorizedException("You must be logged in to submit suggestions")

    payload = payload or SuggestionCreate()
    if not payload.agenda_id:
        raise ValidationException("agenda_id is required")
    content = (payload.content or "").strip()
    if not content:
        raise ValidationException("Suggestion content is required")
    author_name = (payload.author_name or "").strip()
    if not author_name:
        raise ValidationException("Author name is required")

    resolution = validate_and_normalize_agenda_id(client, payload.agenda_id)
    if not resolution.is_valid or not resolution.agenda_uuid:
        raise ValidationException(resolution.error or "Invalid agenda ID")

    auto_approved = moderation.auto_approve_enabled(client)
    suggestion = Suggestion(
        agenda_id=resolution.agenda_uuid,
        user_id=user.id,
        content=content,
        author_name=author_name,
        status=SuggestionStatus.approved if auto_approved else SuggestionStatus.pending,
    )
    try:
        client.add(suggestion)
    except SQLAlchemyError as e:
        client.rollback()
        logger.error(f"Failed to insert suggestion for {user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create suggestion")

    audit.log_suggestion_create(user.id, suggestion.id, resolution.agenda_uuid, suggestion.status)
    background_tasks.add_task(
        email_service.notify_suggestion_in_background,
        author_name,
        content,
        _agenda_title(client, resolution.agenda_uuid),
    )

    return SuggestionCreated(
        success=True,
        suggestion=SuggestionOut.model_validate(suggestion),
        message=moderation.confirmation_message(auto_approved),
        autoApproved=auto_approved,
    )


@router.post("/{suggestion_id}/vote", response_model=VoteResult)
def vote_on_suggestion(
    suggestion_id: str,
    payload: VoteRequest,
    _user: Profile = Depends(get_current_user),
    client: DataClient = Depends(get_user_client),
):
    check = validate_suggestion_uuid(client, suggestion_id)
    if not check.is_valid:
        raise ValidationException(check.error)
    if not check.exists:
        raise NotFoundException(check.error or "Suggestion not found")
    return cast_vote(client, "suggestion_votes", suggestion_id, payload.vote_type)
