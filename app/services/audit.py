"""Audit logging helper functions for key domain events.

Standard single-line logs so they are easy to index.
"""
from __future__ import annotations
import logging
from typing import Optional, Any

from app.utils.datetime import utc_now

_logger = logging.getLogger("app.audit")


def _emit(event: str, user_id: Optional[str] = None, **data: Any):
    payload = {"ts": utc_now().isoformat(), "event": event}
    if user_id:
        payload["user_id"] = user_id
    payload.update(data)
    parts = [f"{k}={repr(v)}" for k, v in payload.items()]
    _logger.info("AUDIT " + " ".join(parts))

# Public convenience wrappers

def log_suggestion_create(user_id: str, suggestion_id: str, agenda_id: str, status: str):
    _emit("suggestion.create", user_id=user_id, suggestion_id=suggestion_id, agenda_id=agenda_id, status=status)

def log_suggestion_review(user_id: str, suggestion_id: str, status: str):
    _emit("suggestion.review", user_id=user_id, suggestion_id=suggestion_id, status=status)

def log_vote(user_id: str, table: str, item_id: str, vote_type: Optional[str]):
    _emit("vote.cast", user_id=user_id, table=table, item_id=item_id, vote_type=vote_type)

def log_settings_change(user_id: str, **changes: Any):
    _emit("settings.update", user_id=user_id, **changes)

def log_testimonial_create(user_id: str, testimonial_id: str):
    _emit("testimonial.create", user_id=user_id, testimonial_id=testimonial_id)

def log_email_send(purpose: str, recipients: int, sent: bool, **data: Any):
    _emit("email.send", purpose=purpose, recipients=recipients, sent=sent, **data)
