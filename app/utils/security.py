"""
Security utilities and authentication
"""

import logging
from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import time
from collections import defaultdict
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.db import get_db
from app.models import UserRole
from app.services.access_policy import AccessPolicy, CurrentUser, policy_for
from app.services.account_service import AccountService, normalize_role
from app.services.repositories import UserRepo

logger = logging.getLogger(__name__)

# Simple in-memory rate limiter
rate_limiter = defaultdict(list)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

ADMIN_USER_ID = "admin"


def _resolve_user(token: str, db: Session) -> CurrentUser:
    """Turn a bearer token into the calling user.

    With Firebase enabled the token is a Firebase ID token. Otherwise the
    admin token maps to the built-in admin and any other token is taken as a
    local user id (development and tests).
    """
    if settings.USE_FIREBASE:
        from app.services.firebase_client import verify_id_token

        try:
            claims = verify_id_token(token)
        except ValueError as e:
            logger.warning(f"Rejected ID token: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token"
            )

        user = AccountService.ensure_user(
            db,
            user_id=claims["uid"],
            email=claims.get("email") or f"{claims['uid']}@users.invalid",
            display_name=claims.get("name"),
            role=claims.get("role")
        )
        role = normalize_role(claims["role"]) if claims.get("role") else user.role
        return CurrentUser(
            id=user.id,
            role=role,
            company_id=user.company_id,
            display_name=user.display_name,
            email=user.email
        )

    if token == settings.ADMIN_TOKEN:
        user = AccountService.ensure_user(
            db,
            user_id=ADMIN_USER_ID,
            email="admin@localhost",
            display_name="Administrator",
            role=UserRole.ADMIN
        )
    else:
        user = UserRepo.get_by_id(db, token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token"
        )
    return CurrentUser(
        id=user.id,
        role=UserRole.ADMIN if token == settings.ADMIN_TOKEN else user.role,
        company_id=user.company_id,
        display_name=user.display_name,
        email=user.email
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> CurrentUser:
    """Require an authenticated caller"""
    return _resolve_user(credentials.credentials, db)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db)
) -> Optional[CurrentUser]:
    """Authenticated caller if a token was sent, else None"""
    if credentials is None:
        return None
    return _resolve_user(credentials.credentials, db)


def get_policy(user: Optional[CurrentUser] = Depends(get_optional_user)) -> AccessPolicy:
    """Query-shaping policy for this request"""
    return policy_for(user)


def require_roles(*roles: str):
    """Dependency factory: the caller must hold one of ``roles``"""
    def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role for this action"
            )
        return user
    return checker


def rate_limit_check(client_ip: str, limit: int = None) -> bool:
    """Simple rate limiting by IP address"""
    if limit is None:
        limit = settings.RATE_LIMIT_PER_MINUTE

    current_time = time.time()
    minute_ago = current_time - 60

    # Clean old requests
    rate_limiter[client_ip] = [
        req_time for req_time in rate_limiter[client_ip]
        if req_time > minute_ago
    ]

    # Check limit
    if len(rate_limiter[client_ip]) >= limit:
        return False

    # Add current request
    rate_limiter[client_ip].append(current_time)
    return True

def get_client_ip(request) -> str:
    """Extract client IP from request"""
    # Check for forwarded IP first (for reverse proxy setups)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    # Check for real IP header
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    # Fall back to direct client IP
    return request.client.host
