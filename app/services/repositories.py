"""
Repository layer: lookups shared by several services and routes.
"""

from __future__ import annotations

import re
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models import Event, TicketType, User

_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def looks_like_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value))


# -------- Event repository --------

class EventRepo:
    @staticmethod
    def get_by_id(db: Session, event_id: str) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def get_by_slug(db: Session, slug: str) -> Optional[Event]:
        return db.query(Event).filter(Event.slug == slug).first()

    @staticmethod
    def get_by_id_or_slug(db: Session, key: str) -> Optional[Event]:
        """Events are addressable by UUID or by slug"""
        if looks_like_uuid(key):
            return EventRepo.get_by_id(db, key)
        return EventRepo.get_by_slug(db, key)

    @staticmethod
    def require(db: Session, event_id: str) -> Event:
        event = EventRepo.get_by_id(db, event_id)
        if not event:
            raise NotFoundError("Event")
        return event

    @staticmethod
    def slug_exists(db: Session, slug: str, exclude_event_id: Optional[str] = None) -> bool:
        query = db.query(Event.id).filter(Event.slug == slug)
        if exclude_event_id:
            query = query.filter(Event.id != exclude_event_id)
        return query.first() is not None


# -------- Ticket type repository --------

class TicketTypeRepo:
    @staticmethod
    def require(db: Session, ticket_type_id: str) -> TicketType:
        ticket_type = db.query(TicketType).filter(TicketType.id == ticket_type_id).first()
        if not ticket_type:
            raise NotFoundError("Ticket type")
        return ticket_type


# -------- User repository --------

class UserRepo:
    @staticmethod
    def get_by_id(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def require(db: Session, user_id: str) -> User:
        user = UserRepo.get_by_id(db, user_id)
        if not user:
            raise NotFoundError("User")
        return user
