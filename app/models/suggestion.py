from sqlalchemy import Column, String, Text, DateTime, ForeignKey, or_
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
import uuid

from app.db import Base
from app.models.profile import is_staff


class SuggestionStatus:
    pending = "pending"
    approved = "approved"
    rejected = "rejected"

    ALL = (pending, approved, rejected)


class Suggestion(Base):
    __tablename__ = "suggestions"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    # Resolved agenda UUID; may be a deterministic id for an agenda not yet seeded
    agenda_id = Column(String, nullable=False, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    author_name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default=SuggestionStatus.pending, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), index=True)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(String, ForeignKey("profiles.id"), nullable=True)

    author = relationship("Profile", foreign_keys=[user_id])

    @classmethod
    def visible_to(cls, profile):
        if is_staff(profile):
            return None
        if profile is None:
            return cls.status == SuggestionStatus.approved
        return or_(cls.status == SuggestionStatus.approved, cls.user_id == profile.id)
