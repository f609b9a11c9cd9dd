"""
Order-related Pydantic schemas
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, Field

class OrderCreate(BaseModel):
    """Checkout request"""
    event_id: str
    ticket_type_id: str
    quantity: int = Field(..., gt=0)
    receipt_url: Optional[str] = None

class OrderStatusUpdate(BaseModel):
    """Reviewer decision on a pending order"""
    status: Literal["approved", "rejected"]

class OrderResponse(BaseModel):
    """Order response"""
    id: str
    user_id: str
    event_id: str
    ticket_type_id: str
    quantity: int
    total_price: Decimal
    receipt_url: Optional[str] = None
    status: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

class OrderListItem(OrderResponse):
    """Order with buyer, ticket type and event names"""
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    ticket_name: Optional[str] = None
    event_name: Optional[str] = None
