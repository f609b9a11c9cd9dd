"""
Tests for the order approval pipeline: stock decrement and ticket issuance
"""

import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.db import Base
from app.core.errors import (
    DependentRecordsError,
    InsufficientStockError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from app.models import Event, Order, OrderStatus, Ticket, TicketStatus, TicketType, User, UserRole
from app.schemas.order import OrderCreate
from app.services.access_policy import AdminPolicy
from app.services.order_service import OrderService
from app.services.ticket_service import TicketService

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_orders.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def sale(db_session):
    """An active event with a 10-unit ticket type, a buyer and a reviewer"""
    buyer = User(id="buyer-1", email="buyer@example.com", display_name="Ana Buyer", role=UserRole.USER)
    reviewer = User(id="org-1", email="org@example.com", display_name="Olga Organizer", role=UserRole.ORGANIZER)
    db_session.add_all([buyer, reviewer])
    db_session.flush()

    event = Event(
        slug="summer-fest",
        name="Summer Fest",
        event_date=datetime(2025, 7, 1, 20, 0),
        status="active",
        created_by=reviewer.id
    )
    db_session.add(event)
    db_session.flush()

    ticket_type = TicketType(event_id=event.id, name="VIP", price=Decimal("25.00"), quantity_available=10)
    db_session.add(ticket_type)
    db_session.commit()

    return {"buyer": buyer, "reviewer": reviewer, "event": event, "ticket_type": ticket_type}

def _place_order(db_session, sale, quantity):
    return OrderService.create_order(
        db_session,
        sale["buyer"].id,
        OrderCreate(
            event_id=sale["event"].id,
            ticket_type_id=sale["ticket_type"].id,
            quantity=quantity,
            receipt_url="/orders/receipts/buyer-1-1700000000000.png"
        )
    )

class TestCreateOrder:
    """Test checkout"""

    def test_order_starts_pending_with_server_total(self, db_session, sale):
        """Total is price times quantity and no stock is taken yet"""
        order = _place_order(db_session, sale, 3)

        assert order.status == OrderStatus.PENDING
        assert order.total_price == Decimal("75.00")

        db_session.refresh(sale["ticket_type"])
        assert sale["ticket_type"].quantity_available == 10
        assert db_session.query(Ticket).count() == 0

    def test_order_over_stock_is_refused(self, db_session, sale):
        with pytest.raises(InsufficientStockError) as exc_info:
            _place_order(db_session, sale, 11)

        assert exc_info.value.remaining == 10
        assert db_session.query(Order).count() == 0

    def test_order_for_informative_event_is_refused(self, db_session, sale):
        sale["event"].is_informative = True
        db_session.commit()

        with pytest.raises(ValidationError):
            _place_order(db_session, sale, 1)

    def test_ticket_type_from_other_event_is_refused(self, db_session, sale):
        other = Event(
            slug="winter-fest",
            name="Winter Fest",
            event_date=datetime(2025, 12, 1),
            created_by=sale["reviewer"].id
        )
        db_session.add(other)
        db_session.commit()

        with pytest.raises(ValidationError):
            OrderService.create_order(
                db_session,
                sale["buyer"].id,
                OrderCreate(event_id=other.id, ticket_type_id=sale["ticket_type"].id, quantity=1)
            )

class TestApproval:
    """Test the reviewer decision"""

    def test_approval_decrements_stock_and_issues_tickets(self, db_session, sale):
        order = _place_order(db_session, sale, 3)

        approved = OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        assert approved.status == OrderStatus.APPROVED
        assert approved.reviewed_by == sale["reviewer"].id
        assert approved.reviewed_at is not None

        db_session.refresh(sale["ticket_type"])
        assert sale["ticket_type"].quantity_available == 7

        tickets = TicketService.tickets_for_order(db_session, order.id)
        assert len(tickets) == 3
        for ticket in tickets:
            assert ticket.status == TicketStatus.VERIFIED
            assert ticket.used_at is None
            assert ticket.holder_name == "Ana Buyer"
            assert ticket.ticket_type_name == "VIP"
            assert ticket.event_id == sale["event"].id
            assert ticket.user_id == sale["buyer"].id
        assert len({t.id for t in tickets}) == 3

    def test_insufficient_stock_leaves_order_pending(self, db_session, sale):
        """Stock sold elsewhere after checkout makes the approval fail with nothing written"""
        order = _place_order(db_session, sale, 4)

        sale["ticket_type"].quantity_available = 2
        db_session.commit()

        with pytest.raises(InsufficientStockError) as exc_info:
            OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        assert exc_info.value.remaining == 2
        assert exc_info.value.details == {"remaining": 2, "requested": 4}

        db_session.refresh(order)
        db_session.refresh(sale["ticket_type"])
        assert order.status == OrderStatus.PENDING
        assert sale["ticket_type"].quantity_available == 2
        assert TicketService.tickets_for_order(db_session, order.id) == []

    def test_sold_out_message(self, db_session, sale):
        order = _place_order(db_session, sale, 1)

        sale["ticket_type"].quantity_available = 0
        db_session.commit()

        with pytest.raises(InsufficientStockError) as exc_info:
            OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        assert "sold out" in exc_info.value.message

    def test_exact_remaining_stock_can_be_approved(self, db_session, sale):
        order = _place_order(db_session, sale, 10)

        OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        db_session.refresh(sale["ticket_type"])
        assert sale["ticket_type"].quantity_available == 0

    def test_approvals_across_orders_add_up(self, db_session, sale):
        first = _place_order(db_session, sale, 3)
        second = _place_order(db_session, sale, 7)

        OrderService.set_order_status(db_session, first.id, OrderStatus.APPROVED, sale["reviewer"].id)
        db_session.refresh(sale["ticket_type"])
        assert sale["ticket_type"].quantity_available == 7

        OrderService.set_order_status(db_session, second.id, OrderStatus.APPROVED, sale["reviewer"].id)
        db_session.refresh(sale["ticket_type"])
        assert sale["ticket_type"].quantity_available == 0

        first_tickets = TicketService.tickets_for_order(db_session, first.id)
        second_tickets = TicketService.tickets_for_order(db_session, second.id)
        assert len(first_tickets) == 3
        assert len(second_tickets) == 7
        assert not {t.id for t in first_tickets} & {t.id for t in second_tickets}
        assert db_session.query(Ticket).count() == 10

    def test_issued_tickets_keep_names_after_renames(self, db_session, sale):
        """Ticket type and holder names are copied onto the ticket at issuance"""
        order = _place_order(db_session, sale, 2)
        OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        sale["ticket_type"].name = "Platinum"
        sale["buyer"].display_name = "Ana Renamed"
        db_session.commit()

        tickets = TicketService.tickets_for_order(db_session, order.id)
        assert len(tickets) == 2
        for ticket in tickets:
            db_session.refresh(ticket)
            assert ticket.ticket_type_name == "VIP"
            assert ticket.holder_name == "Ana Buyer"

    def test_unlimited_stock_is_never_decremented(self, db_session, sale):
        sale["ticket_type"].quantity_available = None
        db_session.commit()

        order = _place_order(db_session, sale, 50)
        OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        db_session.refresh(sale["ticket_type"])
        assert sale["ticket_type"].quantity_available is None
        assert len(TicketService.tickets_for_order(db_session, order.id)) == 50

    def test_rejection_issues_nothing(self, db_session, sale):
        order = _place_order(db_session, sale, 2)

        rejected = OrderService.set_order_status(db_session, order.id, OrderStatus.REJECTED, sale["reviewer"].id)

        assert rejected.status == OrderStatus.REJECTED
        db_session.refresh(sale["ticket_type"])
        assert sale["ticket_type"].quantity_available == 10
        assert TicketService.tickets_for_order(db_session, order.id) == []

    def test_rejected_order_cannot_be_approved(self, db_session, sale):
        order = _place_order(db_session, sale, 2)
        OrderService.set_order_status(db_session, order.id, OrderStatus.REJECTED, sale["reviewer"].id)

        with pytest.raises(InvalidStatusTransitionError):
            OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        assert TicketService.tickets_for_order(db_session, order.id) == []

    def test_second_approval_does_not_mint_again(self, db_session, sale):
        order = _place_order(db_session, sale, 2)
        OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        with pytest.raises(InvalidStatusTransitionError):
            OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        db_session.refresh(sale["ticket_type"])
        assert sale["ticket_type"].quantity_available == 8
        assert len(TicketService.tickets_for_order(db_session, order.id)) == 2

    def test_status_outside_review_targets_is_refused(self, db_session, sale):
        order = _place_order(db_session, sale, 1)

        with pytest.raises(ValidationError):
            OrderService.set_order_status(db_session, order.id, OrderStatus.CANCELLED, sale["reviewer"].id)

        db_session.refresh(order)
        assert order.status == OrderStatus.PENDING

    def test_unknown_order(self, db_session, sale):
        with pytest.raises(NotFoundError):
            OrderService.set_order_status(db_session, "missing", OrderStatus.APPROVED, sale["reviewer"].id)

class TestIssuance:
    """Test ticket issuance directly"""

    def test_issue_is_idempotent_per_order(self, db_session, sale):
        order = _place_order(db_session, sale, 2)

        first = TicketService.issue_tickets(db_session, order)
        db_session.commit()
        second = TicketService.issue_tickets(db_session, order)
        db_session.commit()

        assert {t.id for t in first} == {t.id for t in second}
        db_session.refresh(sale["ticket_type"])
        assert sale["ticket_type"].quantity_available == 8

class TestListOrders:
    """Test order listing"""

    def test_list_joins_names(self, db_session, sale):
        _place_order(db_session, sale, 1)

        rows = OrderService.list_orders(db_session, AdminPolicy())

        assert len(rows) == 1
        assert rows[0]["user_name"] == "Ana Buyer"
        assert rows[0]["ticket_name"] == "VIP"
        assert rows[0]["event_name"] == "Summer Fest"

    def test_delete_order_with_tickets_is_refused(self, db_session, sale):
        order = _place_order(db_session, sale, 1)
        OrderService.set_order_status(db_session, order.id, OrderStatus.APPROVED, sale["reviewer"].id)

        with pytest.raises(DependentRecordsError):
            OrderService.delete_order(db_session, order.id)
