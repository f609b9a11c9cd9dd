"""
Ticket check-in service
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models import Ticket, TicketStatus

logger = logging.getLogger(__name__)

class CheckInOutcome:
    ACCESS_GRANTED = "access_granted"
    ALREADY_USED = "already_used"
    TICKET_NOT_FOUND = "ticket_not_found"
    INVALID_TICKET = "invalid_ticket"

@dataclass
class CheckInResult:
    outcome: str
    ticket_id: str
    holder_name: Optional[str] = None
    event_id: Optional[str] = None
    ticket_type_name: Optional[str] = None
    used_at: Optional[datetime] = None

    @property
    def granted(self) -> bool:
        return self.outcome == CheckInOutcome.ACCESS_GRANTED

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome,
            "ticket_id": self.ticket_id,
            "holder_name": self.holder_name,
            "event_id": self.event_id,
            "ticket_type_name": self.ticket_type_name,
            "used_at": self.used_at.isoformat() if self.used_at else None,
        }

class CheckInService:
    """Service for redeeming tickets at the entrance"""

    @staticmethod
    def validate_ticket(
        db: Session,
        ticket_id: str,
        validator_id: Optional[str] = None
    ) -> CheckInResult:
        """Redeem a scanned ticket.

        verified -> used is one-way. Scanning a used ticket reports the
        original ``used_at`` and writes nothing; so does an unknown id.
        """
        ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
        if not ticket:
            logger.info(f"Check-in rejected: ticket {ticket_id} not found")
            return CheckInResult(outcome=CheckInOutcome.TICKET_NOT_FOUND, ticket_id=ticket_id)

        if ticket.status == TicketStatus.VERIFIED:
            now = datetime.utcnow()
            updated = db.query(Ticket).filter(
                Ticket.id == ticket.id,
                Ticket.status == TicketStatus.VERIFIED
            ).update(
                {
                    Ticket.status: TicketStatus.USED,
                    Ticket.used_at: now,
                    Ticket.validated_by: validator_id,
                },
                synchronize_session=False
            )
            db.commit()
            db.refresh(ticket)

            if updated == 1:
                logger.info(f"Ticket {ticket.id} checked in by {validator_id}")
                return CheckInService._result(CheckInOutcome.ACCESS_GRANTED, ticket)
            # Another scan won the race between the read and the update

        if ticket.status == TicketStatus.USED:
            logger.info(f"Check-in rejected: ticket {ticket.id} already used at {ticket.used_at}")
            return CheckInService._result(CheckInOutcome.ALREADY_USED, ticket)

        logger.warning(f"Check-in rejected: ticket {ticket.id} has unexpected status {ticket.status}")
        return CheckInService._result(CheckInOutcome.INVALID_TICKET, ticket)

    @staticmethod
    def _result(outcome: str, ticket: Ticket) -> CheckInResult:
        return CheckInResult(
            outcome=outcome,
            ticket_id=ticket.id,
            holder_name=ticket.holder_name,
            event_id=ticket.event_id,
            ticket_type_name=ticket.ticket_type_name,
            used_at=ticket.used_at
        )
