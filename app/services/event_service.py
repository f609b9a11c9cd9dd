"""
Event, ticket type and organizer management service
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DependentRecordsError, NotFoundError
from app.models import Event, EventOrganizer, Order, Ticket, TicketType, User
from app.schemas.event import EventCreate, EventUpdate, TicketTypeCreate, TicketTypeUpdate
from app.services.access_policy import AccessPolicy
from app.services.repositories import EventRepo, TicketTypeRepo, UserRepo
from app.utils.slugs import unique_slug

logger = logging.getLogger(__name__)

class EventService:
    """Service for event catalogue operations"""

    # -------- Events --------

    @staticmethod
    def list_events(
        db: Session,
        policy: AccessPolicy,
        status: Optional[str] = None,
        created_by: Optional[str] = None
    ) -> List[Event]:
        query = policy.filter_events(db.query(Event))

        if status:
            query = query.filter(Event.status == status)
        if created_by:
            query = query.filter(Event.created_by == created_by)

        return query.order_by(Event.event_date.desc()).all()

    @staticmethod
    def create_event(db: Session, creator_id: str, event_data: EventCreate) -> Event:
        """Create an event owned by ``creator_id``, inheriting the creator's company"""
        creator = UserRepo.require(db, creator_id)

        slug = unique_slug(event_data.name, lambda candidate: EventRepo.slug_exists(db, candidate))

        event = Event(
            slug=slug,
            name=event_data.name,
            description=event_data.description,
            category=event_data.category or "General",
            event_date=event_data.event_date,
            location=event_data.location,
            image_url=event_data.image_url,
            status=event_data.status,
            created_by=creator.id,
            company_id=creator.company_id,
            is_informative=event_data.is_informative
        )
        db.add(event)
        db.commit()
        db.refresh(event)

        logger.info(f"Event {event.id} created with slug '{event.slug}'")
        return event

    @staticmethod
    def update_event(db: Session, event_id: str, event_update: EventUpdate) -> Event:
        event = EventRepo.require(db, event_id)
        # null means "leave as is"
        changes = {
            field: value
            for field, value in event_update.dict(exclude_unset=True).items()
            if value is not None
        }

        if "name" in changes and changes["name"] != event.name:
            event.slug = unique_slug(
                changes["name"],
                lambda candidate: EventRepo.slug_exists(db, candidate, exclude_event_id=event.id)
            )

        for field, value in changes.items():
            setattr(event, field, value)

        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def delete_event(db: Session, event_id: str) -> None:
        """Delete an event and its ticket types; refused while orders reference it"""
        event = EventRepo.require(db, event_id)

        order_count = db.query(Order).filter(Order.event_id == event.id).count()
        if order_count > 0:
            raise DependentRecordsError(
                "The event cannot be deleted because it has orders",
                {"orders": order_count}
            )

        ticket_count = db.query(Ticket).filter(Ticket.event_id == event.id).count()
        if ticket_count > 0:
            raise DependentRecordsError(
                "The event cannot be deleted because it has issued tickets",
                {"tickets": ticket_count}
            )

        db.delete(event)
        db.commit()
        logger.info(f"Event {event_id} deleted")

    # -------- Ticket types --------

    @staticmethod
    def list_ticket_types(db: Session, event_id: Optional[str] = None) -> List[TicketType]:
        query = db.query(TicketType)
        if event_id:
            query = query.filter(TicketType.event_id == event_id)
        return query.order_by(TicketType.price.asc()).all()

    @staticmethod
    def create_ticket_type(db: Session, ticket_type_data: TicketTypeCreate) -> TicketType:
        EventRepo.require(db, ticket_type_data.event_id)

        ticket_type = TicketType(
            event_id=ticket_type_data.event_id,
            name=ticket_type_data.name,
            description=ticket_type_data.description,
            price=ticket_type_data.price,
            quantity_available=ticket_type_data.quantity_available
        )
        db.add(ticket_type)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise NotFoundError("Event")
        db.refresh(ticket_type)
        return ticket_type

    @staticmethod
    def update_ticket_type(db: Session, ticket_type_id: str, ticket_type_update: TicketTypeUpdate) -> TicketType:
        ticket_type = TicketTypeRepo.require(db, ticket_type_id)

        for field, value in ticket_type_update.dict(exclude_unset=True).items():
            if field == "quantity_available" or value is not None:
                setattr(ticket_type, field, value)

        db.commit()
        db.refresh(ticket_type)
        return ticket_type

    @staticmethod
    def delete_ticket_type(db: Session, ticket_type_id: str) -> None:
        ticket_type = TicketTypeRepo.require(db, ticket_type_id)

        order_count = db.query(Order).filter(Order.ticket_type_id == ticket_type.id).count()
        if order_count > 0:
            raise DependentRecordsError(
                "The ticket type cannot be deleted because it has orders",
                {"orders": order_count}
            )

        db.delete(ticket_type)
        db.commit()

    # -------- Organizers --------

    @staticmethod
    def list_organizers(db: Session, event_id: str) -> List[dict]:
        rows = db.query(EventOrganizer, User).join(
            User, EventOrganizer.user_id == User.id
        ).filter(
            EventOrganizer.event_id == event_id
        ).order_by(EventOrganizer.added_at.asc()).all()

        return [
            {
                "user_id": assignment.user_id,
                "role": assignment.role,
                "added_at": assignment.added_at,
                "email": user.email,
                "display_name": user.display_name,
            }
            for assignment, user in rows
        ]

    @staticmethod
    def assign_organizer(db: Session, event_id: str, user_id: str, role: str) -> EventOrganizer:
        """Add a user to an event, or change their role if already assigned"""
        UserRepo.require(db, user_id)
        EventRepo.require(db, event_id)

        assignment = db.query(EventOrganizer).filter(
            EventOrganizer.event_id == event_id,
            EventOrganizer.user_id == user_id
        ).first()

        if assignment:
            assignment.role = role
            assignment.added_at = datetime.utcnow()
        else:
            assignment = EventOrganizer(event_id=event_id, user_id=user_id, role=role)
            db.add(assignment)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise NotFoundError("Event or user")
        db.refresh(assignment)

        logger.info(f"User {user_id} assigned to event {event_id} as {role}")
        return assignment

    @staticmethod
    def remove_organizer(db: Session, event_id: str, user_id: str) -> None:
        assignment = db.query(EventOrganizer).filter(
            EventOrganizer.event_id == event_id,
            EventOrganizer.user_id == user_id
        ).first()
        if not assignment:
            raise NotFoundError("Organizer for this event")

        db.delete(assignment)
        db.commit()
