"""
Per-ticket-type stock counter
"""

import logging

from sqlalchemy.orm import Session

from app.core.errors import InsufficientStockError, NotFoundError
from app.models import TicketType

logger = logging.getLogger(__name__)

class InventoryService:
    """Checks and decrements ``TicketType.quantity_available``.

    A NULL counter means unlimited stock and is never written. Nothing here
    commits; the caller owns the transaction.
    """

    @staticmethod
    def check_available(ticket_type: TicketType, quantity: int) -> None:
        """Raise ``InsufficientStockError`` if ``quantity`` cannot currently be covered"""
        available = ticket_type.quantity_available
        if available is not None and available < quantity:
            raise InsufficientStockError(remaining=available, requested=quantity)

    @staticmethod
    def reserve(db: Session, ticket_type_id: str, quantity: int) -> TicketType:
        """Take ``quantity`` units out of stock in a single conditional update"""
        ticket_type = db.query(TicketType).filter(TicketType.id == ticket_type_id).first()
        if not ticket_type:
            raise NotFoundError("Ticket type")

        if ticket_type.quantity_available is None:
            return ticket_type

        # The row only changes if enough stock remains at write time
        updated = db.query(TicketType).filter(
            TicketType.id == ticket_type_id,
            TicketType.quantity_available.isnot(None),
            TicketType.quantity_available >= quantity
        ).update(
            {TicketType.quantity_available: TicketType.quantity_available - quantity},
            synchronize_session=False
        )

        db.refresh(ticket_type)

        if updated == 0:
            remaining = ticket_type.quantity_available or 0
            logger.warning(
                f"Stock check failed for ticket type {ticket_type_id}: requested {quantity}, remaining {remaining}"
            )
            raise InsufficientStockError(remaining=remaining, requested=quantity)

        logger.info(
            f"Reserved {quantity} of ticket type {ticket_type_id}; {ticket_type.quantity_available} left"
        )
        return ticket_type
