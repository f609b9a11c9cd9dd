"""
Dashboard rollups, computed per request
"""

from typing import Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models import Event, Order, OrderStatus, Ticket, TicketStatus, TicketType, User
from app.services.access_policy import AccessPolicy

def _count_when(condition):
    return func.count(case((condition, 1)))

def _sum_when(condition, column):
    return func.coalesce(func.sum(case((condition, column), else_=0)), 0)

class StatsService:
    """Read-only aggregation queries for the dashboards"""

    @staticmethod
    def dashboard_stats(db: Session) -> Dict:
        """Admin dashboard headline numbers"""
        total_users = db.query(func.count(User.id)).scalar()
        pending_orders = db.query(func.count(Order.id)).filter(
            Order.status == OrderStatus.PENDING
        ).scalar()
        sold_tickets = db.query(func.count(Ticket.id)).filter(
            Ticket.status == TicketStatus.VERIFIED,
            Ticket.order_id.isnot(None)
        ).scalar()
        manual_tickets = db.query(func.count(Ticket.id)).filter(
            Ticket.status == TicketStatus.VERIFIED,
            Ticket.order_id.is_(None)
        ).scalar()
        total_revenue = db.query(func.coalesce(func.sum(Order.total_price), 0)).filter(
            Order.status == OrderStatus.APPROVED
        ).scalar()

        return {
            "total_users": total_users or 0,
            "pending_orders": pending_orders or 0,
            "sold_tickets": sold_tickets or 0,
            "manual_tickets": manual_tickets or 0,
            "total_revenue": float(total_revenue or 0),
        }

    @staticmethod
    def recent_sales(db: Session, limit: int = 5) -> List[Dict]:
        rows = db.query(Order, User.display_name, User.email).outerjoin(
            User, Order.user_id == User.id
        ).filter(
            Order.status == OrderStatus.APPROVED
        ).order_by(Order.created_at.desc()).limit(limit).all()

        return [
            {
                "id": order.id,
                "user_name": display_name or email,
                "created_at": order.created_at.isoformat() if order.created_at else None,
                "total_price": float(order.total_price),
                "quantity": order.quantity,
            }
            for order, display_name, email in rows
        ]

    @staticmethod
    def event_stats(db: Session, event_id: str) -> Dict:
        event = db.query(Event).filter(Event.id == event_id).first()
        if not event:
            raise NotFoundError("Event")

        ticket_types = db.query(func.count(TicketType.id)).filter(TicketType.event_id == event_id).scalar()

        orders = db.query(
            func.count(Order.id).label("total_orders"),
            _count_when(Order.status == OrderStatus.PENDING).label("pending_orders"),
            _count_when(Order.status == OrderStatus.APPROVED).label("approved_orders"),
            _count_when(Order.status == OrderStatus.REJECTED).label("rejected_orders"),
            func.coalesce(func.sum(Order.total_price), 0).label("total_revenue"),
            _sum_when(Order.status == OrderStatus.APPROVED, Order.total_price).label("approved_revenue"),
            _sum_when(Order.status == OrderStatus.PENDING, Order.total_price).label("pending_revenue"),
        ).filter(Order.event_id == event_id).one()

        tickets_sold = db.query(func.count(Ticket.id)).filter(
            Ticket.event_id == event_id,
            Ticket.order_id.isnot(None)
        ).scalar()
        tickets_used = db.query(func.count(Ticket.id)).filter(
            Ticket.event_id == event_id,
            Ticket.status == TicketStatus.USED
        ).scalar()
        total_capacity = db.query(func.sum(TicketType.quantity_available)).filter(
            TicketType.event_id == event_id
        ).scalar()

        return {
            "event_name": event.name,
            "ticket_types": ticket_types or 0,
            "total_orders": orders.total_orders or 0,
            "pending_orders": orders.pending_orders or 0,
            "approved_orders": orders.approved_orders or 0,
            "rejected_orders": orders.rejected_orders or 0,
            "total_revenue": float(orders.total_revenue or 0),
            "approved_revenue": float(orders.approved_revenue or 0),
            "pending_revenue": float(orders.pending_revenue or 0),
            "tickets_sold": tickets_sold or 0,
            "tickets_used": tickets_used or 0,
            "total_capacity": int(total_capacity or 0),
        }

    @staticmethod
    def organizer_stats(db: Session, policy: AccessPolicy, event_id: Optional[str] = None) -> Dict:
        """Order counts and revenue by status over the events ``policy`` can see"""
        query = db.query(
            _count_when(Order.status == OrderStatus.PENDING).label("pending_orders"),
            _count_when(Order.status == OrderStatus.APPROVED).label("approved_orders"),
            _count_when(Order.status == OrderStatus.REJECTED).label("rejected_orders"),
            _sum_when(Order.status == OrderStatus.PENDING, Order.total_price).label("pending_revenue"),
            _sum_when(Order.status == OrderStatus.APPROVED, Order.total_price).label("approved_revenue"),
            _sum_when(Order.status == OrderStatus.REJECTED, Order.total_price).label("rejected_revenue"),
            func.count(Order.id).label("total_orders"),
            func.coalesce(func.sum(Order.total_price), 0).label("total_revenue"),
        )
        query = policy.filter_orders(query)
        if event_id:
            query = query.filter(Order.event_id == event_id)

        stats = query.one()

        return {
            "pending_orders": stats.pending_orders or 0,
            "approved_orders": stats.approved_orders or 0,
            "rejected_orders": stats.rejected_orders or 0,
            "pending_revenue": float(stats.pending_revenue or 0),
            "approved_revenue": float(stats.approved_revenue or 0),
            "rejected_revenue": float(stats.rejected_revenue or 0),
            "total_orders": stats.total_orders or 0,
            "total_revenue": float(stats.total_revenue or 0),
        }
