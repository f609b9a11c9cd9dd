"""
Admin API routes - companies, users and dashboards
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.models import UserRole
from app.schemas.account import CompanyCreate, CompanyResponse, UserResponse, UserRoleUpdate
from app.services.access_policy import CurrentUser, policy_for
from app.services.account_service import AccountService
from app.services.stats_service import StatsService
from app.utils.security import require_roles
from app.utils.responses import success_response

router = APIRouter()

admin_only = require_roles(UserRole.ADMIN)

@router.get("/companies")
async def list_companies(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(admin_only)
):
    """List companies"""
    companies = AccountService.list_companies(db, status=status)

    return success_response(
        message="Companies retrieved successfully",
        data=[CompanyResponse.from_orm(c).dict() for c in companies]
    )

@router.post("/companies", status_code=201)
async def create_company(
    company_data: CompanyCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(admin_only)
):
    """Create a company"""
    company = AccountService.create_company(db, company_data)

    return success_response(
        message="Company created successfully",
        data=CompanyResponse.from_orm(company).dict(),
        status_code=201
    )

@router.get("/users")
async def list_users(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(admin_only)
):
    """List registered users"""
    users = AccountService.list_users(db)

    return success_response(
        message="Users retrieved successfully",
        data=[UserResponse.from_orm(u).dict() for u in users]
    )

@router.put("/users/{user_id}/role")
async def update_user_role(
    user_id: str,
    role_update: UserRoleUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(admin_only)
):
    """Change a user's role and optionally attach them to a company"""
    updated = AccountService.update_role(
        db, user_id, role_update.role, company_id=role_update.company_id
    )

    return success_response(
        message="User role updated successfully",
        data=UserResponse.from_orm(updated).dict()
    )

@router.get("/stats")
async def get_dashboard_stats(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(admin_only)
):
    """Admin dashboard headline numbers"""
    return success_response(
        message="Dashboard statistics retrieved",
        data=StatsService.dashboard_stats(db)
    )

@router.get("/recent-sales")
async def get_recent_sales(
    limit: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(admin_only)
):
    """Latest approved orders"""
    return success_response(
        message="Recent sales retrieved",
        data=StatsService.recent_sales(db, limit=limit)
    )

@router.get("/organizer-stats")
async def get_organizer_stats(
    event_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(
        require_roles(*UserRole.STAFF)
    )
):
    """Order rollup over the events the caller manages"""
    return success_response(
        message="Organizer statistics retrieved",
        data=StatsService.organizer_stats(db, policy_for(user), event_id=event_id)
    )
