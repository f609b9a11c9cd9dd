"""
Ticket model

The id doubles as the QR payload. ``order_id`` is NULL for tickets minted by
the manual generator. Ticket type and holder names are copied at issuance.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_id

class TicketStatus:
    VERIFIED = "verified"
    USED = "used"

    ALL = (VERIFIED, USED)

class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=True, index=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=True, index=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=True, index=True)
    ticket_type_name = Column(String(255), nullable=False, default="General")
    holder_name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default=TicketStatus.VERIFIED)
    used_at = Column(DateTime, nullable=True)
    validated_by = Column(String(128), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    order = relationship("Order", back_populates="tickets")

    __table_args__ = (
        CheckConstraint("status IN ('verified', 'used')", name="check_ticket_status"),
    )
