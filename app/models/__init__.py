"""
Database models package
"""

from .company import Company
from .user import User, UserRole
from .event import Event, EventStatus
from .ticket_type import TicketType
from .order import Order, OrderStatus
from .ticket import Ticket, TicketStatus
from .event_organizer import EventOrganizer, OrganizerRole

__all__ = [
    "Company",
    "User",
    "UserRole",
    "Event",
    "EventStatus",
    "TicketType",
    "Order",
    "OrderStatus",
    "Ticket",
    "TicketStatus",
    "EventOrganizer",
    "OrganizerRole",
]
