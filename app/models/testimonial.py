from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime
from datetime import datetime, UTC
import uuid

from app.db import Base
from app.models.profile import is_staff


class Testimonial(Base):
    __tablename__ = "testimonials"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    profession = Column(String(200), nullable=True)
    testimonial = Column(Text, nullable=False)
    image_url = Column(Text, nullable=True)
    linkedin_url = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    @classmethod
    def visible_to(cls, profile):
        if is_staff(profile):
            return None
        return cls.is_active.is_(True)
