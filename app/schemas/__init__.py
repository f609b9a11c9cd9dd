"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .order import *
from .ticket import *
from .account import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "EventStats",
    "TicketTypeCreate",
    "TicketTypeUpdate",
    "TicketTypeResponse",
    "OrganizerAssign",
    "OrganizerResponse",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderResponse",
    "OrderListItem",
    "TicketResponse",
    "TicketGenerateRequest",
    "TicketValidateRequest",
    "CompanyCreate",
    "CompanyResponse",
    "UserResponse",
    "UserRoleUpdate",
]
