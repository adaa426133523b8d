from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime


class SuggestionCreate(BaseModel):
    # Presence and emptiness are checked by the route so both return 400
    agenda_id: Optional[str] = None
    content: Optional[str] = None
    author_name: Optional[str] = None


class SuggestionPublic(BaseModel):
    """Public feed entry; never carries user_id."""
    id: str
    content: str
    author_name: str
    created_at: Optional[datetime] = None

    model_config = {
        'from_attributes': True
    }


class SuggestionOut(SuggestionPublic):
    agenda_id: str
    status: str


class SuggestionAdminOut(SuggestionOut):
    user_id: str
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None


class SuggestionFeed(BaseModel):
    suggestions: List[SuggestionPublic]
    agenda_id: str


class SuggestionCreated(BaseModel):
    success: bool
    suggestion: SuggestionOut
    message: str
    autoApproved: bool


class SuggestionReview(BaseModel):
    status: Literal["approved", "rejected", "pending"]
