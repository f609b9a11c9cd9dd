"""
User model

Rows mirror identities from the auth provider; ``id`` is the provider uid.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models._ids import new_id

class UserRole:
    ADMIN = "admin"
    ORGANIZER = "organizer"
    VALIDATOR = "validator"
    USER = "user"

    ALL = (ADMIN, ORGANIZER, VALIDATOR, USER)
    STAFF = (ADMIN, ORGANIZER, VALIDATOR)

class User(Base):
    __tablename__ = "users"

    id = Column(String(128), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    company = relationship("Company", back_populates="users")
    orders = relationship("Order", back_populates="user")

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'organizer', 'validator', 'user')", name="check_user_role"),
    )
