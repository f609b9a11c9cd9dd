"""
Event, ticket type and organizer Pydantic schemas
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, Field

EventStatusValue = Literal["draft", "active", "completed", "ended", "cancelled", "hidden"]
OrganizerRoleValue = Literal["owner", "organizer", "validator"]

class EventCreate(BaseModel):
    """Schema for creating an event"""
    name: str = Field(..., min_length=1, max_length=255)
    event_date: datetime
    description: Optional[str] = None
    category: str = "General"
    location: Optional[str] = None
    image_url: Optional[str] = None
    status: EventStatusValue = "active"
    is_informative: bool = False

class EventUpdate(BaseModel):
    """Schema for updating an event; omitted fields are left alone"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    event_date: Optional[datetime] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    status: Optional[EventStatusValue] = None
    is_informative: Optional[bool] = None

class EventResponse(BaseModel):
    """Event response"""
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    category: str
    event_date: datetime
    location: Optional[str] = None
    image_url: Optional[str] = None
    status: str
    created_by: str
    company_id: Optional[str] = None
    is_informative: bool
    created_at: datetime

    class Config:
        from_attributes = True

class EventStats(BaseModel):
    """Per-event rollup"""
    event_name: str
    ticket_types: int
    total_orders: int
    pending_orders: int
    approved_orders: int
    rejected_orders: int
    total_revenue: float
    approved_revenue: float
    pending_revenue: float
    tickets_sold: int
    tickets_used: int
    total_capacity: int

class TicketTypeCreate(BaseModel):
    """Schema for creating a ticket type; no quantity means unlimited stock"""
    event_id: str
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    quantity_available: Optional[int] = Field(None, ge=0)

class TicketTypeUpdate(BaseModel):
    """Schema for updating a ticket type"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    quantity_available: Optional[int] = Field(None, ge=0)

class TicketTypeResponse(BaseModel):
    """Ticket type response"""
    id: str
    event_id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    quantity_available: Optional[int] = None

    class Config:
        from_attributes = True

class OrganizerAssign(BaseModel):
    """Assign a user to an event"""
    user_id: str
    role: OrganizerRoleValue = "organizer"

class OrganizerResponse(BaseModel):
    """Event organizer listing entry"""
    user_id: str
    role: str
    added_at: datetime
    email: Optional[str] = None
    display_name: Optional[str] = None
