"""
Ticket-related Pydantic schemas
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

class TicketResponse(BaseModel):
    """Ticket response"""
    id: str
    order_id: Optional[str] = None
    user_id: Optional[str] = None
    event_id: Optional[str] = None
    ticket_type_name: str
    holder_name: str
    status: str
    used_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

class TicketGenerateRequest(BaseModel):
    """Manual ticket generator request"""
    event_id: str
    quantity: int = Field(..., gt=0)
    holder_name: Optional[str] = None
    ticket_type_name: Optional[str] = None

class TicketValidateRequest(BaseModel):
    """Scanned or typed ticket id"""
    ticket_id: str = Field(..., min_length=1)
