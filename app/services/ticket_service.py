"""
Ticket issuance service
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.models import Event, Order, Ticket, TicketStatus, User
from app.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

DEFAULT_TICKET_TYPE_NAME = "General"
DEFAULT_GUEST_NAME = "Guest"

class TicketService:
    """Service for minting and reading tickets"""

    @staticmethod
    def issue_tickets(db: Session, order: Order) -> List[Ticket]:
        """Decrement stock and mint one ticket per unit of ``order``.

        Re-running this for an order that already has tickets returns those
        tickets untouched, so a retried approval never mints twice.
        Flushes but does not commit.
        """
        existing = TicketService.tickets_for_order(db, order.id)
        if existing:
            logger.info(f"Order {order.id} already has {len(existing)} tickets; not issuing again")
            return existing

        ticket_type = InventoryService.reserve(db, order.ticket_type_id, order.quantity)

        holder = db.query(User).filter(User.id == order.user_id).first()
        holder_name = (holder.display_name or holder.email) if holder else DEFAULT_GUEST_NAME

        tickets = [
            Ticket(
                order_id=order.id,
                user_id=order.user_id,
                event_id=order.event_id,
                ticket_type_name=ticket_type.name,
                holder_name=holder_name,
                status=TicketStatus.VERIFIED
            )
            for _ in range(order.quantity)
        ]
        db.add_all(tickets)
        db.flush()

        logger.info(f"Issued {len(tickets)} tickets for order {order.id}")
        return tickets

    @staticmethod
    def generate_tickets(
        db: Session,
        event_id: str,
        holder_name: Optional[str],
        quantity: int,
        ticket_type_name: Optional[str] = None
    ) -> List[Ticket]:
        """Mint comp/guest tickets outside of any order. Stock is not touched."""
        if quantity < 1 or quantity > settings.MAX_GENERATED_TICKETS:
            raise ValidationError(
                f"Quantity must be between 1 and {settings.MAX_GENERATED_TICKETS}"
            )

        event = db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise NotFoundError("Event")

        tickets = [
            Ticket(
                order_id=None,
                user_id=None,
                event_id=event.id,
                ticket_type_name=ticket_type_name or DEFAULT_TICKET_TYPE_NAME,
                holder_name=holder_name or DEFAULT_GUEST_NAME,
                status=TicketStatus.VERIFIED
            )
            for _ in range(quantity)
        ]
        db.add_all(tickets)
        db.commit()
        for ticket in tickets:
            db.refresh(ticket)

        logger.info(f"Generated {quantity} manual tickets for event {event_id}")
        return tickets

    @staticmethod
    def tickets_for_order(db: Session, order_id: str) -> List[Ticket]:
        return db.query(Ticket).filter(Ticket.order_id == order_id).order_by(Ticket.created_at).all()

    @staticmethod
    def get_ticket(db: Session, ticket_id: str) -> Ticket:
        ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
        if not ticket:
            raise NotFoundError("Ticket")
        return ticket

    @staticmethod
    def list_tickets(
        db: Session,
        user_id: Optional[str] = None,
        order_id: Optional[str] = None,
        event_id: Optional[str] = None,
        generated_only: bool = False
    ) -> List[Ticket]:
        """List tickets, newest first"""
        query = db.query(Ticket)

        if user_id:
            query = query.filter(Ticket.user_id == user_id)
        if order_id:
            query = query.filter(Ticket.order_id == order_id)
        if event_id:
            query = query.filter(Ticket.event_id == event_id)
        if generated_only:
            query = query.filter(Ticket.order_id.is_(None))

        return query.order_by(Ticket.created_at.desc()).all()

