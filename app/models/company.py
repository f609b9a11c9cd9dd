"""
Company model
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_id

COMPANY_STATUSES = ("active", "inactive")

class Company(Base):
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    users = relationship("User", back_populates="company")
    events = relationship("Event", back_populates="company")

    __table_args__ = (
        CheckConstraint("status IN ('active', 'inactive')", name="check_company_status"),
    )
