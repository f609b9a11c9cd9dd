"""
Ticket routes: wallet, QR codes, check-in and the manual generator
"""

from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.errors import PermissionDeniedError
from app.models import Ticket, UserRole
from app.schemas.ticket import TicketGenerateRequest, TicketResponse, TicketValidateRequest
from app.services.access_policy import CurrentUser, can_manage_event
from app.services.checkin_service import CheckInOutcome, CheckInService
from app.services.qr_service import QRService
from app.services.repositories import EventRepo
from app.services.ticket_service import TicketService
from app.utils.security import get_current_user, require_roles
from app.utils.responses import success_response, error_response

router = APIRouter()

STAFF_ROLES = ("owner", "organizer", "validator")


def _can_see_ticket(db: Session, user: CurrentUser, ticket: Ticket) -> bool:
    if ticket.user_id == user.id:
        return True
    event = EventRepo.get_by_id(db, ticket.event_id) if ticket.event_id else None
    if event is None:
        return user.is_admin
    return can_manage_event(db, user, event, STAFF_ROLES)

@router.get("")
async def list_tickets(
    event_id: Optional[str] = None,
    generated_only: bool = False,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """The caller's tickets, or an event's tickets for its staff"""
    if event_id and user.role in UserRole.STAFF:
        event = EventRepo.require(db, event_id)
        if not can_manage_event(db, user, event, STAFF_ROLES):
            raise PermissionDeniedError("You do not manage this event")
        tickets = TicketService.list_tickets(db, event_id=event_id, generated_only=generated_only)
    else:
        tickets = TicketService.list_tickets(db, user_id=user.id, event_id=event_id)

    return success_response(
        message="Tickets retrieved successfully",
        data=[TicketResponse.from_orm(t).dict() for t in tickets]
    )

@router.post("/generate", status_code=201)
async def generate_tickets(
    generate_request: TicketGenerateRequest,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """Mint tickets outside the order flow (courtesy passes, walk-ins)"""
    tickets = TicketService.generate_tickets(
        db,
        event_id=generate_request.event_id,
        holder_name=generate_request.holder_name,
        quantity=generate_request.quantity,
        ticket_type_name=generate_request.ticket_type_name
    )

    return success_response(
        message=f"{len(tickets)} tickets generated successfully",
        data=[TicketResponse.from_orm(t).dict() for t in tickets],
        status_code=201
    )

@router.post("/validate")
async def validate_ticket(
    validate_request: TicketValidateRequest,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(
        require_roles(*UserRole.STAFF)
    )
):
    """Redeem a scanned ticket at the entrance"""
    ticket_id = validate_request.ticket_id.strip()

    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if ticket and not _can_see_ticket(db, user, ticket):
        raise PermissionDeniedError("You cannot validate tickets for this event")

    result = CheckInService.validate_ticket(db, ticket_id, validator_id=user.id)

    if result.outcome == CheckInOutcome.TICKET_NOT_FOUND:
        return error_response(
            message="Ticket not found",
            error_code=result.outcome,
            details=result.to_dict(),
            status_code=404
        )

    messages = {
        CheckInOutcome.ACCESS_GRANTED: "Access granted",
        CheckInOutcome.ALREADY_USED: "Ticket already used",
        CheckInOutcome.INVALID_TICKET: "Invalid ticket",
    }
    return success_response(
        message=messages[result.outcome],
        data=result.to_dict()
    )

@router.get("/{ticket_id}")
async def get_ticket(
    ticket_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Get one ticket"""
    ticket = TicketService.get_ticket(db, ticket_id)
    if not _can_see_ticket(db, user, ticket):
        raise PermissionDeniedError()

    return success_response(
        message="Ticket retrieved successfully",
        data=TicketResponse.from_orm(ticket).dict()
    )

@router.get("/{ticket_id}/qr.png")
async def get_ticket_qr(
    ticket_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """QR code image for a ticket"""
    ticket = TicketService.get_ticket(db, ticket_id)
    if not _can_see_ticket(db, user, ticket):
        raise PermissionDeniedError()

    qr_bytes = QRService.generate_ticket_qr(ticket.id)

    return Response(
        content=qr_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f"inline; filename=ticket_{ticket.id}.png"}
    )
