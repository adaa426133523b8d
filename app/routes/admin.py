"""
Admin moderation surface: review queue and site settings.
The session gate already rejects non-admins on /api/admin; require_admin
keeps the routes safe when mounted without it.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.exceptions import NotFoundException, ValidationException
from app.models.profile import Profile
from app.models.suggestion import Suggestion, SuggestionStatus
from app.schemas.admin import SystemSettingsOut, SystemSettingsUpdate
from app.schemas.suggestion import SuggestionAdminOut, SuggestionReview
from app.services import moderation
from app.services.auth import require_admin
from app.services.data_client import DataClient, get_user_client

logger = logging.getLogger("app.admin")

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/suggestions", response_model=List[SuggestionAdminOut])
def list_suggestions_for_review(
    status: Optional[str] = Query(SuggestionStatus.pending),
    limit: int = Query(100, ge=1, le=500),
    client: DataClient = Depends(get_user_client),
):
    query = client.query(Suggestion)
    if status and status != "all":
        if status not in SuggestionStatus.ALL:
            raise ValidationException(f"status must be one of: {', '.join(SuggestionStatus.ALL)}, all")
        query = query.filter(Suggestion.status == status)
    return query.order_by(Suggestion.created_at.desc()).limit(limit).all()


@router.patch("/suggestions/{suggestion_id}", response_model=SuggestionAdminOut)
def review_suggestion(
    suggestion_id: str,
    payload: SuggestionReview,
    current_user: Profile = Depends(require_admin),
    client: DataClient = Depends(get_user_client),
):
    suggestion = client.get(Suggestion, suggestion_id)
    if suggestion is None:
        raise NotFoundException("Suggestion not found")
    return moderation.review_suggestion(client, suggestion, payload.status, current_user.id)


@router.get("/settings", response_model=SystemSettingsOut)
def get_settings(client: DataClient = Depends(get_user_client)):
    row = moderation.get_system_settings(client)
    if row is None:
        return SystemSettingsOut(auto_approve_suggestions=False)
    return row


@router.put("/settings", response_model=SystemSettingsOut)
def update_settings(
    payload: SystemSettingsUpdate,
    current_user: Profile = Depends(require_admin),
    client: DataClient = Depends(get_user_client),
):
    row = moderation.update_system_settings(client, current_user.id, payload.auto_approve_suggestions)
    logger.info(f"Auto-approve set to {row.auto_approve_suggestions} by {current_user.id}")
    return row
