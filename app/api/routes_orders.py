"""
Order routes: checkout, receipt upload and reviewer decisions
"""

from typing import Optional
from fastapi import APIRouter, Depends, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.errors import PermissionDeniedError
from app.models import Order, UserRole
from app.schemas.order import OrderCreate, OrderListItem, OrderResponse, OrderStatusUpdate
from app.schemas.ticket import TicketResponse
from app.services.access_policy import AdminPolicy, CurrentUser, can_manage_event, policy_for
from app.services.order_service import OrderService
from app.services.repositories import EventRepo
from app.services.storage_service import StorageService
from app.services.ticket_service import TicketService
from app.utils.security import get_current_user, require_roles
from app.utils.responses import success_response

router = APIRouter()

REVIEWER_ROLES = ("owner", "organizer", "validator")


def _can_see_order(db: Session, user: CurrentUser, order: Order) -> bool:
    if order.user_id == user.id:
        return True
    event = EventRepo.get_by_id(db, order.event_id)
    return event is not None and can_manage_event(db, user, event, REVIEWER_ROLES)

@router.post("", status_code=201)
async def create_order(
    order_data: OrderCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Submit an order; it waits for a reviewer to check the receipt"""
    order = OrderService.create_order(db, user.id, order_data)

    return success_response(
        message="Order created successfully. It will be reviewed shortly.",
        data=OrderResponse.from_orm(order).dict(),
        status_code=201
    )

@router.get("")
async def list_orders(
    status: Optional[str] = None,
    event_id: Optional[str] = None,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """List orders: staff see their events' orders, customers their own"""
    if user.role in UserRole.STAFF:
        rows = OrderService.list_orders(
            db, policy_for(user), status=status, event_id=event_id
        )
    else:
        # customers are scoped by user_id rather than by event visibility
        rows = OrderService.list_orders(
            db, AdminPolicy(), status=status, user_id=user.id, event_id=event_id
        )

    data = []
    for row in rows:
        item = OrderListItem.from_orm(row["order"]).dict()
        item.update(
            user_name=row["user_name"],
            user_email=row["user_email"],
            ticket_name=row["ticket_name"],
            event_name=row["event_name"]
        )
        data.append(item)

    return success_response(
        message="Orders retrieved successfully",
        data=data
    )

@router.post("/receipts")
async def upload_receipt(
    file: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user)
):
    """Upload a payment receipt; the returned URL goes on the order"""
    file_content = await file.read()
    receipt_url = StorageService.save_receipt(user.id, file.filename, file_content)

    return success_response(
        message="Receipt uploaded successfully",
        data={"receipt_url": receipt_url}
    )

@router.get("/receipts/{filename}")
async def get_receipt(
    filename: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Serve a receipt to its owner or a reviewer of the order's event"""
    if not user.is_admin and StorageService.uploader_of(filename) != user.id:
        order = db.query(Order).filter(Order.receipt_url == f"/orders/receipts/{filename}").first()
        if not order or not _can_see_order(db, user, order):
            raise PermissionDeniedError()

    content, content_type = StorageService.read_receipt(filename)

    return Response(content=content, media_type=content_type)

@router.get("/{order_id}")
async def get_order(
    order_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Get one order"""
    order = OrderService.get_order(db, order_id)
    if not _can_see_order(db, user, order):
        raise PermissionDeniedError()

    return success_response(
        message="Order retrieved successfully",
        data=OrderResponse.from_orm(order).dict()
    )

@router.put("/{order_id}/status")
async def review_order(
    order_id: str,
    status_update: OrderStatusUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(
        require_roles(*UserRole.STAFF)
    )
):
    """Approve or reject a pending order; approval issues its tickets"""
    order = OrderService.get_order(db, order_id)
    event = EventRepo.require(db, order.event_id)
    if not can_manage_event(db, user, event, REVIEWER_ROLES):
        raise PermissionDeniedError("You cannot review orders for this event")

    order = OrderService.set_order_status(db, order_id, status_update.status, user.id)
    tickets = TicketService.tickets_for_order(db, order.id)

    return success_response(
        message=f"Order {order.status} successfully",
        data={
            "order": OrderResponse.from_orm(order).dict(),
            "tickets": [TicketResponse.from_orm(t).dict() for t in tickets]
        }
    )

@router.get("/{order_id}/tickets")
async def get_order_tickets(
    order_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user)
):
    """Tickets issued for an order"""
    order = OrderService.get_order(db, order_id)
    if not _can_see_order(db, user, order):
        raise PermissionDeniedError()

    tickets = TicketService.tickets_for_order(db, order.id)

    return success_response(
        message="Tickets retrieved successfully",
        data=[TicketResponse.from_orm(t).dict() for t in tickets]
    )

@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_roles(UserRole.ADMIN))
):
    """Delete an order that has no tickets"""
    OrderService.delete_order(db, order_id)

    return success_response(message="Order deleted successfully")
