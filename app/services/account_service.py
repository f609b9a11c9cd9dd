"""
Company and user administration service
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models import Company, User, UserRole
from app.schemas.account import CompanyCreate
from app.services.repositories import UserRepo

logger = logging.getLogger(__name__)

# Legacy and localized role labels still sent by older clients
ROLE_MAPPING = {
    "customer": UserRole.USER,
    "cliente": UserRole.USER,
    "validador": UserRole.VALIDATOR,
    "organizador": UserRole.ORGANIZER,
    "admin": UserRole.ADMIN,
    "user": UserRole.USER,
    "validator": UserRole.VALIDATOR,
    "organizer": UserRole.ORGANIZER,
}


def normalize_role(role: Optional[str]) -> str:
    """Map any role label to a stored role, defaulting to ``user``"""
    if not role:
        return UserRole.USER
    return ROLE_MAPPING.get(role.strip().lower(), UserRole.USER)


class AccountService:
    """Service for companies and user roles"""

    @staticmethod
    def list_companies(db: Session, status: Optional[str] = None) -> List[Company]:
        query = db.query(Company)
        if status:
            query = query.filter(Company.status == status)
        return query.order_by(Company.name.asc()).all()

    @staticmethod
    def create_company(db: Session, company_data: CompanyCreate) -> Company:
        company = Company(
            name=company_data.name,
            description=company_data.description,
            contact_email=company_data.contact_email,
            contact_phone=company_data.contact_phone,
            status=company_data.status
        )
        db.add(company)
        db.commit()
        db.refresh(company)
        logger.info(f"Company {company.id} created: {company.name}")
        return company

    @staticmethod
    def list_users(db: Session) -> List[User]:
        return db.query(User).order_by(User.created_at.desc()).all()

    @staticmethod
    def update_role(db: Session, user_id: str, role: str, company_id: Optional[str] = None) -> User:
        user = UserRepo.require(db, user_id)

        if company_id is not None:
            if not db.query(Company.id).filter(Company.id == company_id).first():
                raise NotFoundError("Company")
            user.company_id = company_id

        user.role = normalize_role(role)
        db.commit()
        db.refresh(user)

        logger.info(f"User {user_id} role set to {user.role}")
        return user

    @staticmethod
    def ensure_user(
        db: Session,
        user_id: str,
        email: str,
        display_name: Optional[str] = None,
        role: Optional[str] = None
    ) -> User:
        """Create the local row for a provider identity seen for the first time"""
        user = UserRepo.get_by_id(db, user_id)
        if user:
            return user

        user = User(
            id=user_id,
            email=email,
            display_name=display_name,
            role=normalize_role(role)
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Registered user {user_id} ({email})")
        return user
