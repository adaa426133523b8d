from sqlalchemy import Column, Integer, Boolean, DateTime, String
from datetime import datetime, UTC

from app.db import Base


class SystemSettings(Base):
    """Single-row table of site-wide switches."""
    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True, default=1)
    auto_approve_suggestions = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))
    updated_by = Column(String, nullable=True)
