"""
Tests for event, ticket type and organizer management
"""

import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.db import Base
from app.core.errors import DependentRecordsError, NotFoundError
from app.models import Company, Event, EventOrganizer, Order, TicketType, User, UserRole
from app.schemas.event import EventCreate, EventUpdate, TicketTypeCreate, TicketTypeUpdate
from app.services.access_policy import AdminPolicy, PublicPolicy
from app.services.event_service import EventService
from app.services.repositories import EventRepo

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_events.db"
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
def organizer(db_session):
    db_session.add(Company(id="acme", name="Acme Events"))
    db_session.flush()
    user = User(id="org-1", email="org@example.com", role=UserRole.ORGANIZER, company_id="acme")
    db_session.add(user)
    db_session.commit()
    return user

def _create(db_session, organizer, name="Jazz Night", **kwargs):
    return EventService.create_event(
        db_session,
        organizer.id,
        EventCreate(name=name, event_date=datetime(2025, 10, 3, 20, 0), **kwargs)
    )

class TestEvents:
    """Test event lifecycle"""

    def test_create_assigns_slug_and_company(self, db_session, organizer):
        event = _create(db_session, organizer)

        assert event.slug == "jazz-night"
        assert event.company_id == "acme"
        assert event.created_by == organizer.id
        assert event.status == "active"
        assert event.category == "General"

    def test_duplicate_names_get_suffixes(self, db_session, organizer):
        first = _create(db_session, organizer)
        second = _create(db_session, organizer)
        third = _create(db_session, organizer)

        assert [first.slug, second.slug, third.slug] == ["jazz-night", "jazz-night-1", "jazz-night-2"]

    def test_lookup_by_id_or_slug(self, db_session, organizer):
        event = _create(db_session, organizer)

        assert EventRepo.get_by_id_or_slug(db_session, event.id).id == event.id
        assert EventRepo.get_by_id_or_slug(db_session, "jazz-night").id == event.id
        assert EventRepo.get_by_id_or_slug(db_session, "no-such-event") is None

    def test_rename_reslugs(self, db_session, organizer):
        event = _create(db_session, organizer)

        updated = EventService.update_event(db_session, event.id, EventUpdate(name="Blues Night"))

        assert updated.slug == "blues-night"

    def test_null_name_keeps_name_and_slug(self, db_session, organizer):
        event = _create(db_session, organizer)

        updated = EventService.update_event(
            db_session, event.id, EventUpdate.model_validate({"name": None, "location": "Hall"})
        )

        assert updated.name == "Jazz Night"
        assert updated.slug == "jazz-night"
        assert updated.location == "Hall"

    def test_update_keeping_name_keeps_slug(self, db_session, organizer):
        event = _create(db_session, organizer)

        updated = EventService.update_event(
            db_session, event.id, EventUpdate(name="Jazz Night", location="Main Hall")
        )

        assert updated.slug == "jazz-night"
        assert updated.location == "Main Hall"

    def test_list_respects_policy_and_status(self, db_session, organizer):
        _create(db_session, organizer, name="Open Day")
        _create(db_session, organizer, name="Secret Rehearsal", status="draft")

        assert len(EventService.list_events(db_session, AdminPolicy())) == 2
        assert [e.name for e in EventService.list_events(db_session, PublicPolicy())] == ["Open Day"]
        assert len(EventService.list_events(db_session, AdminPolicy(), status="draft")) == 1

    def test_delete_without_orders_removes_ticket_types(self, db_session, organizer):
        event = _create(db_session, organizer)
        EventService.create_ticket_type(
            db_session, TicketTypeCreate(event_id=event.id, name="General", price=Decimal("10"))
        )

        EventService.delete_event(db_session, event.id)

        assert db_session.query(Event).count() == 0
        assert db_session.query(TicketType).count() == 0

    def test_delete_with_orders_is_refused(self, db_session, organizer):
        event = _create(db_session, organizer)
        ticket_type = EventService.create_ticket_type(
            db_session, TicketTypeCreate(event_id=event.id, name="General", price=Decimal("10"))
        )
        db_session.add(Order(
            user_id=organizer.id,
            event_id=event.id,
            ticket_type_id=ticket_type.id,
            quantity=1,
            total_price=Decimal("10")
        ))
        db_session.commit()

        with pytest.raises(DependentRecordsError) as exc_info:
            EventService.delete_event(db_session, event.id)

        assert exc_info.value.details == {"orders": 1}
        assert db_session.query(Event).count() == 1

    def test_delete_unknown_event(self, db_session, organizer):
        with pytest.raises(NotFoundError):
            EventService.delete_event(db_session, "missing")

class TestTicketTypes:
    """Test ticket type management"""

    def test_listed_cheapest_first(self, db_session, organizer):
        event = _create(db_session, organizer)
        for name, price in [("VIP", "50"), ("General", "10"), ("Early", "5")]:
            EventService.create_ticket_type(
                db_session, TicketTypeCreate(event_id=event.id, name=name, price=Decimal(price))
            )

        names = [t.name for t in EventService.list_ticket_types(db_session, event.id)]

        assert names == ["Early", "General", "VIP"]

    def test_stock_can_be_made_unlimited(self, db_session, organizer):
        event = _create(db_session, organizer)
        ticket_type = EventService.create_ticket_type(
            db_session,
            TicketTypeCreate(event_id=event.id, name="General", price=Decimal("10"), quantity_available=20)
        )

        updated = EventService.update_ticket_type(
            db_session, ticket_type.id, TicketTypeUpdate(quantity_available=None)
        )

        assert updated.quantity_available is None

    def test_unset_fields_are_left_alone(self, db_session, organizer):
        event = _create(db_session, organizer)
        ticket_type = EventService.create_ticket_type(
            db_session,
            TicketTypeCreate(event_id=event.id, name="General", price=Decimal("10"), quantity_available=20)
        )

        updated = EventService.update_ticket_type(db_session, ticket_type.id, TicketTypeUpdate(name="Floor"))

        assert updated.name == "Floor"
        assert updated.quantity_available == 20

    def test_unknown_event(self, db_session, organizer):
        with pytest.raises(NotFoundError):
            EventService.create_ticket_type(
                db_session, TicketTypeCreate(event_id="missing", name="General", price=Decimal("1"))
            )

class TestOrganizers:
    """Test event team assignments"""

    def test_assign_is_an_upsert(self, db_session, organizer):
        event = _create(db_session, organizer)
        helper = User(id="helper", email="helper@example.com", display_name="Helper")
        db_session.add(helper)
        db_session.commit()

        EventService.assign_organizer(db_session, event.id, "helper", "validator")
        EventService.assign_organizer(db_session, event.id, "helper", "organizer")

        assert db_session.query(EventOrganizer).count() == 1
        organizers = EventService.list_organizers(db_session, event.id)
        assert organizers[0]["role"] == "organizer"
        assert organizers[0]["display_name"] == "Helper"

    def test_remove(self, db_session, organizer):
        event = _create(db_session, organizer)
        EventService.assign_organizer(db_session, event.id, organizer.id, "owner")

        EventService.remove_organizer(db_session, event.id, organizer.id)

        assert EventService.list_organizers(db_session, event.id) == []

    def test_remove_missing_assignment(self, db_session, organizer):
        event = _create(db_session, organizer)

        with pytest.raises(NotFoundError):
            EventService.remove_organizer(db_session, event.id, "nobody")

    def test_assign_unknown_user(self, db_session, organizer):
        event = _create(db_session, organizer)

        with pytest.raises(NotFoundError):
            EventService.assign_organizer(db_session, event.id, "nobody", "validator")
