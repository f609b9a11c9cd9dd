"""
QR code generation service
"""

import io
import qrcode

class QRService:
    """Service for rendering ticket QR codes"""

    @staticmethod
    def generate_ticket_qr(ticket_id: str, format: str = 'PNG') -> bytes:
        """Render a ticket id as a QR image; the id is the whole payload"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(ticket_id)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format=format)

        return buffer.getvalue()
