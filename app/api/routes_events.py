"""
Event catalogue routes: events, ticket types, organizers, stats and exports
"""

from typing import Optional
from fastapi import APIRouter, Depends, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.errors import NotFoundError, PermissionDeniedError
from app.models import Event, UserRole
from app.schemas.event import (
    EventCreate,
    EventResponse,
    EventStats,
    EventUpdate,
    OrganizerAssign,
    OrganizerResponse,
    TicketTypeCreate,
    TicketTypeResponse,
    TicketTypeUpdate,
)
from app.services.access_policy import AccessPolicy, CurrentUser, can_manage_event
from app.services.event_service import EventService
from app.services.excel_service import ExcelService
from app.services.repositories import EventRepo, TicketTypeRepo
from app.services.stats_service import StatsService
from app.services.storage_service import StorageService
from app.utils.security import get_policy, require_roles
from app.utils.responses import success_response

router = APIRouter()

staff_only = require_roles(UserRole.ADMIN, UserRole.ORGANIZER)
any_staff = require_roles(*UserRole.STAFF)


def _managed_event(db: Session, user: CurrentUser, event_id: str, roles=("owner", "organizer")) -> Event:
    event = EventRepo.require(db, event_id)
    if not can_manage_event(db, user, event, roles):
        raise PermissionDeniedError("You do not manage this event")
    return event

# -------- Events --------

@router.get("/events")
async def list_events(
    status: Optional[str] = None,
    created_by: Optional[str] = None,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_policy)
):
    """List the events visible to the caller"""
    events = EventService.list_events(db, policy, status=status, created_by=created_by)

    return success_response(
        message="Events retrieved successfully",
        data=[EventResponse.from_orm(e).dict() for e in events]
    )

@router.get("/events/{id_or_slug}")
async def get_event(
    id_or_slug: str,
    db: Session = Depends(get_db),
    policy: AccessPolicy = Depends(get_policy)
):
    """Get one event by id or slug"""
    event = EventRepo.get_by_id_or_slug(db, id_or_slug)
    if not event:
        raise NotFoundError("Event")

    visible = policy.filter_events(db.query(Event.id)).filter(Event.id == event.id).first()
    if not visible:
        raise NotFoundError("Event")

    return success_response(
        message="Event retrieved successfully",
        data=EventResponse.from_orm(event).dict()
    )

@router.post("/events", status_code=201)
async def create_event(
    event_data: EventCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Create a new event owned by the caller"""
    event = EventService.create_event(db, user.id, event_data)

    return success_response(
        message="Event created successfully",
        data=EventResponse.from_orm(event).dict(),
        status_code=201
    )

@router.put("/events/{event_id}")
async def update_event(
    event_id: str,
    event_update: EventUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Update an event"""
    _managed_event(db, user, event_id)
    event = EventService.update_event(db, event_id, event_update)

    return success_response(
        message="Event updated successfully",
        data=EventResponse.from_orm(event).dict()
    )

@router.delete("/events/{event_id}")
async def delete_event(
    event_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Delete an event that has no orders"""
    _managed_event(db, user, event_id, roles=("owner",))
    EventService.delete_event(db, event_id)

    return success_response(message="Event deleted successfully")

@router.post("/events/{event_id}/image")
async def upload_event_image(
    event_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Upload an event cover image and attach it to the event"""
    event = _managed_event(db, user, event_id)

    file_content = await file.read()
    image_url = StorageService.save_event_image(user.id, file.filename, file_content)

    event.image_url = image_url
    db.commit()

    return success_response(
        message="Event image uploaded successfully",
        data={"image_url": image_url}
    )

@router.get("/events/{event_id}/stats")
async def get_event_stats(
    event_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(any_staff)
):
    """Order, revenue and attendance rollup for one event"""
    _managed_event(db, user, event_id, roles=("owner", "organizer", "validator"))
    stats = StatsService.event_stats(db, event_id)

    return success_response(
        message="Event statistics retrieved",
        data=EventStats(**stats).dict()
    )

@router.get("/events/{event_id}/attendees.xlsx")
async def export_attendees(
    event_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Download the attendee list of an event"""
    event = _managed_event(db, user, event_id)
    excel_bytes = ExcelService.export_attendees(event.id, db)

    return Response(
        content=excel_bytes,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=attendees_{event.slug}.xlsx"}
    )

# -------- Ticket types --------

@router.post("/ticket-types", status_code=201)
async def create_ticket_type(
    ticket_type_data: TicketTypeCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Add a ticket type to an event"""
    _managed_event(db, user, ticket_type_data.event_id)
    ticket_type = EventService.create_ticket_type(db, ticket_type_data)

    return success_response(
        message="Ticket type created successfully",
        data=TicketTypeResponse.from_orm(ticket_type).dict(),
        status_code=201
    )

@router.put("/ticket-types/{ticket_type_id}")
async def update_ticket_type(
    ticket_type_id: str,
    ticket_type_update: TicketTypeUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Update price, name or stock of a ticket type"""
    ticket_type = TicketTypeRepo.require(db, ticket_type_id)
    _managed_event(db, user, ticket_type.event_id)
    ticket_type = EventService.update_ticket_type(db, ticket_type_id, ticket_type_update)

    return success_response(
        message="Ticket type updated successfully",
        data=TicketTypeResponse.from_orm(ticket_type).dict()
    )

@router.delete("/ticket-types/{ticket_type_id}")
async def delete_ticket_type(
    ticket_type_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Delete a ticket type that has no orders"""
    ticket_type = TicketTypeRepo.require(db, ticket_type_id)
    _managed_event(db, user, ticket_type.event_id)
    EventService.delete_ticket_type(db, ticket_type_id)

    return success_response(message="Ticket type deleted successfully")

# -------- Organizers --------

@router.get("/events/{event_id}/organizers")
async def list_organizers(
    event_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """List the team of an event"""
    _managed_event(db, user, event_id)
    organizers = EventService.list_organizers(db, event_id)

    return success_response(
        message="Organizers retrieved successfully",
        data=[OrganizerResponse(**o).dict() for o in organizers]
    )

@router.post("/events/{event_id}/organizers")
async def assign_organizer(
    event_id: str,
    assignment_data: OrganizerAssign,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Add a user to the event team, or change their role"""
    _managed_event(db, user, event_id, roles=("owner",))
    assignment = EventService.assign_organizer(
        db, event_id, assignment_data.user_id, assignment_data.role
    )

    return success_response(
        message="Organizer assigned successfully",
        data={
            "event_id": assignment.event_id,
            "user_id": assignment.user_id,
            "role": assignment.role,
            "added_at": assignment.added_at
        }
    )

@router.delete("/events/{event_id}/organizers/{user_id}")
async def remove_organizer(
    event_id: str,
    user_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(staff_only)
):
    """Remove a user from the event team"""
    _managed_event(db, user, event_id, roles=("owner",))
    EventService.remove_organizer(db, event_id, user_id)

    return success_response(message="Organizer removed successfully")
