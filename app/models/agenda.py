from sqlalchemy import Column, String, Integer, Text, DateTime, JSON
from datetime import datetime, UTC
import uuid

from app.db import Base

PRIORITIES = ("High", "Medium", "Low")


class Agenda(Base):
    """A reform proposal ("manifesto item") in the public catalog."""
    __tablename__ = "agendas"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    # Manifesto number; "manifesto-<n>" and "<n>" resolve through this column
    sequence_id = Column(Integer, unique=True, nullable=True, index=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False, default="")
    problem_statement = Column(Text, nullable=True)
    problem_statement_long = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    priority = Column(String(20), nullable=False, default="Medium")
    timeline = Column(String(50), nullable=True)
    key_points = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))
