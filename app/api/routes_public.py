"""
Public API routes - no authentication required
"""

import time
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.errors import NotFoundError
from app.models import EventStatus, Ticket
from app.schemas.event import TicketTypeResponse
from app.services.event_service import EventService
from app.services.repositories import EventRepo
from app.utils.security import rate_limit_check, get_client_ip
from app.utils.responses import success_response, rate_limit_error

router = APIRouter()

STARTED_AT = time.time()

@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "uptime": round(time.time() - STARTED_AT, 3)
    }

@router.get("/events/{id_or_slug}/ticket-types")
async def list_event_ticket_types(
    id_or_slug: str,
    db: Session = Depends(get_db)
):
    """Ticket types on sale for an active event, cheapest first"""
    event = EventRepo.get_by_id_or_slug(db, id_or_slug)
    if not event or event.status != EventStatus.ACTIVE:
        raise NotFoundError("Event")

    ticket_types = EventService.list_ticket_types(db, event.id)

    return success_response(
        message="Ticket types retrieved successfully",
        data=[TicketTypeResponse.from_orm(t).dict() for t in ticket_types]
    )

@router.get("/tickets/{ticket_id}/status")
async def lookup_ticket_status(
    ticket_id: str,
    request: Request,
    db: Session = Depends(get_db)
):
    """Let a holder check whether a ticket is still valid"""
    # Rate limiting for public access
    client_ip = get_client_ip(request)
    if not rate_limit_check(client_ip):
        raise rate_limit_error()

    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if not ticket:
        raise NotFoundError("Ticket")

    event = EventRepo.get_by_id(db, ticket.event_id) if ticket.event_id else None

    return success_response(
        message="Ticket status retrieved successfully",
        data={
            "id": ticket.id,
            "status": ticket.status,
            "ticket_type_name": ticket.ticket_type_name,
            "event_name": event.name if event else None,
            "used_at": ticket.used_at
        }
    )
