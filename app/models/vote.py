from sqlalchemy import Column, String, DateTime, UniqueConstraint
from datetime import datetime, UTC
import uuid

from app.db import Base

VOTE_TYPES = ("like", "dislike")


class _VoteColumns:
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    item_id = Column(String, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    vote_type = Column(String(10), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))


class AgendaVote(_VoteColumns, Base):
    __tablename__ = "agenda_votes"
    __table_args__ = (UniqueConstraint("item_id", "user_id", name="uq_agenda_vote_item_user"),)


class SuggestionVote(_VoteColumns, Base):
    __tablename__ = "suggestion_votes"
    __table_args__ = (UniqueConstraint("item_id", "user_id", name="uq_suggestion_vote_item_user"),)


VOTE_TABLES = {
    AgendaVote.__tablename__: AgendaVote,
    SuggestionVote.__tablename__: SuggestionVote,
}
