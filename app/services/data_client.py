"""Request-scoped database clients.

``user_client`` applies each model's ``visible_to`` row policy for the
caller; ``service_client`` skips it for trusted server-side reads. Routes
receive one or the other through the FastAPI dependencies at the bottom
of this module.
"""
from __future__ import annotations

from typing import Optional, Type

from fastapi import Depends
from sqlalchemy.orm import Query, Session

from app.db import get_db
from app.models.profile import Profile
from app.services.auth import get_current_user_optional


class DataClient:
    def __init__(self, session: Session, profile: Optional[Profile] = None, service_role: bool = False):
        self.session = session
        self.profile = profile
        self.service_role = service_role

    @property
    def user_id(self) -> Optional[str]:
        return self.profile.id if self.profile is not None else None

    def query(self, model: Type, *entities) -> Query:
        """Query ``model`` (or the given columns of it) through its row policy."""
        q = self.session.query(*entities) if entities else self.session.query(model)
        if self.service_role:
            return q
        policy = getattr(model, "visible_to", None)
        if policy is None:
            return q
        condition = policy(self.profile)
        return q if condition is None else q.filter(condition)

    def get(self, model: Type, ident):
        return self.query(model).filter(model.id == ident).first()

    def add(self, obj, commit: bool = True):
        self.session.add(obj)
        if commit:
            self.session.commit()
            self.session.refresh(obj)
        return obj

    def delete(self, obj, commit: bool = True):
        self.session.delete(obj)
        if commit:
            self.session.commit()

    def commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()


def user_client(session: Session, profile: Optional[Profile]) -> DataClient:
    return DataClient(session, profile=profile, service_role=False)


def service_client(session: Session) -> DataClient:
    return DataClient(session, profile=None, service_role=True)


def get_user_client(
    db: Session = Depends(get_db),
    current_user: Optional[Profile] = Depends(get_current_user_optional),
) -> DataClient:
    return user_client(db, current_user)


def get_service_client(db: Session = Depends(get_db)) -> DataClient:
    return service_client(db)
