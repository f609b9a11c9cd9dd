"""
Company and user Pydantic schemas
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field

class CompanyCreate(BaseModel):
    """Schema for creating a company"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    status: Literal["active", "inactive"] = "active"

class CompanyResponse(BaseModel):
    """Company response"""
    id: str
    name: str
    description: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True

class UserResponse(BaseModel):
    """User response"""
    id: str
    email: str
    display_name: Optional[str] = None
    role: str
    company_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class UserRoleUpdate(BaseModel):
    """Role change; legacy labels are normalized server side"""
    role: str = Field(..., min_length=1)
    company_id: Optional[str] = None
