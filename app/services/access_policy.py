"""
Query-shaping access policies.

A policy is picked once per request from the authenticated caller and then
applied to every event or order query the handler runs, instead of each
endpoint branching on role and company by itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Query, Session

from app.models import Event, EventOrganizer, EventStatus, Order, UserRole


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: str
    company_id: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class AccessPolicy:
    """Base policy: subclasses restrict which events (and their orders) are visible"""

    def event_condition(self):
        raise NotImplementedError

    def filter_events(self, query: Query) -> Query:
        condition = self.event_condition()
        return query if condition is None else query.filter(condition)

    def filter_orders(self, query: Query) -> Query:
        condition = self.event_condition()
        if condition is None:
            return query
        visible_events = select(Event.id).where(condition)
        return query.filter(Order.event_id.in_(visible_events))


class AdminPolicy(AccessPolicy):
    def event_condition(self):
        return None


class OwnerFilteredPolicy(AccessPolicy):
    """Events the user created or was assigned to"""

    def __init__(self, user_id: str):
        self.user_id = user_id

    def event_condition(self):
        assigned = select(EventOrganizer.event_id).where(EventOrganizer.user_id == self.user_id)
        return or_(Event.created_by == self.user_id, Event.id.in_(assigned))


class CompanyFilteredPolicy(AccessPolicy):
    def __init__(self, company_id: str):
        self.company_id = company_id

    def event_condition(self):
        return Event.company_id == self.company_id


class PublicPolicy(AccessPolicy):
    """Anonymous visitors and customers without a company"""

    def event_condition(self):
        return Event.status == EventStatus.ACTIVE


def policy_for(user: Optional[CurrentUser]) -> AccessPolicy:
    """Select the policy for the caller"""
    if user is None:
        return PublicPolicy()
    if user.is_admin:
        return AdminPolicy()
    if user.role in (UserRole.ORGANIZER, UserRole.VALIDATOR):
        return OwnerFilteredPolicy(user.id)
    if user.company_id:
        return CompanyFilteredPolicy(user.company_id)
    return PublicPolicy()


def can_manage_event(
    db: Session,
    user: CurrentUser,
    event: Event,
    roles: Iterable[str] = ("owner", "organizer")
) -> bool:
    """Whether ``user`` may act on ``event`` with one of the organizer ``roles``"""
    if user.is_admin or event.created_by == user.id:
        return True

    assignment = db.query(EventOrganizer).filter(
        EventOrganizer.event_id == event.id,
        EventOrganizer.user_id == user.id
    ).first()
    return assignment is not None and assignment.role in tuple(roles)
