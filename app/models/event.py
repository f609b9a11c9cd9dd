"""
Event model
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_id

class EventStatus:
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    ENDED = "ended"
    CANCELLED = "cancelled"
    HIDDEN = "hidden"

    ALL = (DRAFT, ACTIVE, COMPLETED, ENDED, CANCELLED, HIDDEN)

class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=new_id)
    slug = Column(String(120), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, default="General")
    event_date = Column(DateTime, nullable=False)
    location = Column(String(255), nullable=True)
    image_url = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=EventStatus.ACTIVE)
    created_by = Column(String(128), ForeignKey("users.id"), nullable=False)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True, index=True)
    is_informative = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    company = relationship("Company", back_populates="events")
    ticket_types = relationship("TicketType", back_populates="event", cascade="all, delete-orphan")
    organizers = relationship("EventOrganizer", back_populates="event", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="event")

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'active', 'completed', 'ended', 'cancelled', 'hidden')",
            name="check_event_status",
        ),
    )
