"""
Excel export service for event attendee lists
"""

import io
import pandas as pd
from sqlalchemy.orm import Session

from app.models import Ticket, TicketStatus

class ExcelService:
    """Service for handling Excel operations"""

    COLUMNS = ['Ticket ID', 'Holder', 'Ticket Type', 'Status', 'Used At', 'Order ID', 'Source']

    @staticmethod
    def build_attendee_rows(event_id: str, db: Session) -> list:
        """One row per ticket of the event, in issuance order"""
        tickets = db.query(Ticket).filter(Ticket.event_id == event_id).order_by(Ticket.created_at).all()

        rows = []
        for ticket in tickets:
            rows.append({
                'Ticket ID': ticket.id,
                'Holder': ticket.holder_name,
                'Ticket Type': ticket.ticket_type_name,
                'Status': 'Used' if ticket.status == TicketStatus.USED else 'Valid',
                'Used At': ticket.used_at.strftime('%Y-%m-%d %H:%M:%S') if ticket.used_at else '',
                'Order ID': ticket.order_id or '',
                'Source': 'Order' if ticket.order_id else 'Generated'
            })
        return rows

    @staticmethod
    def export_attendees(event_id: str, db: Session) -> bytes:
        """Export the event's tickets to an .xlsx workbook"""
        rows = ExcelService.build_attendee_rows(event_id, db)
        df = pd.DataFrame(rows, columns=ExcelService.COLUMNS)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Attendees')

        return buffer.getvalue()
