"""
Event organizer assignment model
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_id

class OrganizerRole:
    OWNER = "owner"
    ORGANIZER = "organizer"
    VALIDATOR = "validator"

    ALL = (OWNER, ORGANIZER, VALIDATOR)

class EventOrganizer(Base):
    __tablename__ = "event_organizers"

    id = Column(String(36), primary_key=True, default=new_id)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=OrganizerRole.ORGANIZER)
    added_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    event = relationship("Event", back_populates="organizers")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("event_id", "user_id", name="uq_event_organizer"),
        CheckConstraint("role IN ('owner', 'organizer', 'validator')", name="check_event_organizer_role"),
    )
