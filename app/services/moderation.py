"""Suggestion moderation and the site-wide auto-approve switch."""
import logging
from typing import Optional

from app.models.suggestion import Suggestion, SuggestionStatus
from app.models.system_setting import SystemSettings
from app.services import audit
from app.utils.datetime import utc_now

logger = logging.getLogger("app.moderation")

AUTO_APPROVED_MESSAGE = (
    "Thank you for your suggestion! Our team will review it and compile it "
    "in our next version of the manifesto."
)
PENDING_MESSAGE = (
    "Thanks for the suggestion! Due to many malicious actors, auto approve system is "
    "currently disabled but it is submitted to the team. It will be shown on website "
    "if it's approved."
)


def get_system_settings(client) -> Optional[SystemSettings]:
    return client.query(SystemSettings).first()


def auto_approve_enabled(client) -> bool:
    row = get_system_settings(client)
    return bool(row and row.auto_approve_suggestions is True)


def update_system_settings(client, user_id: str, auto_approve_suggestions: bool) -> SystemSettings:
    row = get_system_settings(client)
    if row is None:
        row = SystemSettings(id=1)
    row.auto_approve_suggestions = auto_approve_suggestions
    row.updated_by = user_id
    row.updated_at = utc_now()
    client.add(row)
    audit.log_settings_change(user_id, auto_approve_suggestions=auto_approve_suggestions)
    return row


def confirmation_message(auto_approved: bool) -> str:
    return AUTO_APPROVED_MESSAGE if auto_approved else PENDING_MESSAGE


def review_suggestion(client, suggestion: Suggestion, status: str, reviewer_id: str) -> Suggestion:
    if status not in SuggestionStatus.ALL:
        raise ValueError(f"Unknown suggestion status: {status}")
    suggestion.status = status
    suggestion.reviewed_by = reviewer_id if status != SuggestionStatus.pending else None
    suggestion.reviewed_at = utc_now() if status != SuggestionStatus.pending else None
    client.add(suggestion)
    audit.log_suggestion_review(reviewer_id, suggestion.id, status)
    logger.info(f"Suggestion {suggestion.id} marked {status} by {reviewer_id}")
    return suggestion
