from sqlalchemy import Column, String, DateTime, Enum
from datetime import datetime, UTC
import enum

from app.db import Base


class ProfileRole(enum.Enum):
    user = "user"
    moderator = "moderator"
    admin = "admin"


STAFF_ROLES = {ProfileRole.moderator, ProfileRole.admin}


def role_of(profile) -> ProfileRole | None:
    """Role of a profile-like object, tolerating plain strings from mocks."""
    if profile is None:
        return None
    role = getattr(profile, "role", None)
    if isinstance(role, ProfileRole) or role is None:
        return role
    try:
        return ProfileRole(str(role))
    except ValueError:
        return None


def is_staff(profile) -> bool:
    return role_of(profile) in STAFF_ROLES


def is_admin(profile) -> bool:
    return role_of(profile) == ProfileRole.admin


class Profile(Base):
    __tablename__ = "profiles"
    # Firebase uid
    id = Column(String, primary_key=True, index=True)
    email = Column(String, nullable=True, index=True)
    display_name = Column(String, nullable=True)
    role = Column(Enum(ProfileRole), nullable=False, default=ProfileRole.user)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    @classmethod
    def visible_to(cls, profile):
        if is_admin(profile):
            return None
        if profile is None:
            return cls.id.is_(None)
        return cls.id == profile.id
