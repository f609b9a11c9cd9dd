"""
Order model
"""

from datetime import datetime
from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_id

class OrderStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    ALL = (PENDING, APPROVED, REJECTED, CANCELLED)
    # Targets a reviewer may move a pending order to
    REVIEW_TARGETS = (APPROVED, REJECTED)

class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    ticket_type_id = Column(String(36), ForeignKey("ticket_types.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)
    receipt_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING, index=True)
    reviewed_by = Column(String(128), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="orders")
    event = relationship("Event", back_populates="orders")
    ticket_type = relationship("TicketType", back_populates="orders")
    tickets = relationship("Ticket", back_populates="order")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_order_quantity_positive"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled')",
            name="check_order_status",
        ),
    )
