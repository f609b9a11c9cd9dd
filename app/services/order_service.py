"""
Order checkout and review service
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.errors import (
    DependentRecordsError,
    InvalidStatusTransitionError,
    NotFoundError,
    TicketingError,
    ValidationError,
)
from app.models import Event, EventStatus, Order, OrderStatus, TicketType, User
from app.schemas.order import OrderCreate
from app.services.access_policy import AccessPolicy
from app.services.inventory_service import InventoryService
from app.services.ticket_service import TicketService

logger = logging.getLogger(__name__)

class OrderService:
    """Service for the order lifecycle: pending -> approved | rejected"""

    @staticmethod
    def create_order(db: Session, user_id: str, order_data: OrderCreate) -> Order:
        """Create a pending order for a customer.

        The total is derived here from the ticket type price and never
        recomputed afterwards. Stock is only checked, not taken; it is taken
        when the order is approved.
        """
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User")

        event = db.query(Event).filter(Event.id == order_data.event_id).first()
        if not event:
            raise NotFoundError("Event")
        if event.is_informative:
            raise ValidationError("This event is informative only and does not sell tickets")
        if event.status != EventStatus.ACTIVE:
            raise ValidationError(f"Event is {event.status} and not accepting orders")

        ticket_type = db.query(TicketType).filter(TicketType.id == order_data.ticket_type_id).first()
        if not ticket_type:
            raise NotFoundError("Ticket type")
        if ticket_type.event_id != event.id:
            raise ValidationError("Ticket type does not belong to this event")

        InventoryService.check_available(ticket_type, order_data.quantity)

        order = Order(
            user_id=user.id,
            event_id=event.id,
            ticket_type_id=ticket_type.id,
            quantity=order_data.quantity,
            total_price=Decimal(ticket_type.price) * order_data.quantity,
            receipt_url=order_data.receipt_url,
            status=OrderStatus.PENDING
        )
        db.add(order)
        db.commit()
        db.refresh(order)

        logger.info(f"Order {order.id} created by {user.id}: {order.quantity} x {ticket_type.name}")
        return order

    @staticmethod
    def get_order(db: Session, order_id: str) -> Order:
        order = db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError("Order")
        return order

    @staticmethod
    def set_order_status(
        db: Session,
        order_id: str,
        status: str,
        reviewer_id: Optional[str] = None
    ) -> Order:
        """Apply a reviewer decision to a pending order.

        Approval issues the tickets first, in the same transaction as the
        status flip; if issuance fails nothing is written and the order stays
        pending.
        """
        if status not in OrderStatus.REVIEW_TARGETS:
            raise ValidationError(
                f"Invalid status '{status}'. Use: {', '.join(OrderStatus.REVIEW_TARGETS)}"
            )

        order = OrderService.get_order(db, order_id)
        if order.status != OrderStatus.PENDING:
            raise InvalidStatusTransitionError(order.status, status)

        try:
            if status == OrderStatus.APPROVED:
                TicketService.issue_tickets(db, order)

            now = datetime.utcnow()
            # Compare-and-set so two reviewers cannot both flip the same order
            updated = db.query(Order).filter(
                Order.id == order.id,
                Order.status == OrderStatus.PENDING
            ).update(
                {
                    Order.status: status,
                    Order.reviewed_by: reviewer_id,
                    Order.reviewed_at: now,
                    Order.updated_at: now,
                },
                synchronize_session=False
            )
            if updated == 0:
                db.rollback()
                current = OrderService.get_order(db, order_id)
                raise InvalidStatusTransitionError(current.status, status)

            db.commit()
        except TicketingError:
            db.rollback()
            raise

        db.refresh(order)
        logger.info(f"Order {order.id} {status} by {reviewer_id}")
        return order

    @staticmethod
    def list_orders(
        db: Session,
        policy: AccessPolicy,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
        event_id: Optional[str] = None
    ) -> List[dict]:
        """List orders visible under ``policy`` with buyer, ticket and event names"""
        query = db.query(
            Order,
            User.display_name.label("user_name"),
            User.email.label("user_email"),
            TicketType.name.label("ticket_name"),
            Event.name.label("event_name")
        ).outerjoin(User, Order.user_id == User.id) \
         .outerjoin(TicketType, Order.ticket_type_id == TicketType.id) \
         .outerjoin(Event, Order.event_id == Event.id)

        query = policy.filter_orders(query)

        if status:
            query = query.filter(Order.status == status)
        if user_id:
            query = query.filter(Order.user_id == user_id)
        if event_id:
            query = query.filter(Order.event_id == event_id)

        rows = query.order_by(Order.created_at.desc()).all()

        return [
            {
                "order": row.Order,
                "user_name": row.user_name,
                "user_email": row.user_email,
                "ticket_name": row.ticket_name,
                "event_name": row.event_name,
            }
            for row in rows
        ]

    @staticmethod
    def delete_order(db: Session, order_id: str) -> None:
        """Delete an order that never produced tickets"""
        order = OrderService.get_order(db, order_id)
        if TicketService.tickets_for_order(db, order.id):
            raise DependentRecordsError("Order has issued tickets and cannot be deleted")

        db.delete(order)
        db.commit()
        logger.info(f"Order {order_id} deleted")
