"""
Visit slip PDF generator.

Draws a fixed, single-page A4 form for an admin-entered visit. Coordinates
below are measured from the top-left corner of the page and converted to
reportlab's bottom-left origin when drawing. Layout is static: long values
are not wrapped or truncated and there is no pagination.
"""

import io
import os
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from spa_booking.core.config import Settings
from spa_booking.core.errors import RenderError
from spa_booking.core.logger import logger
from spa_booking.models.booking_models import NormalizedAdminVisit

MARGIN = 40
ROW_ADVANCE = 55
LOGO_WIDTH = 60

FRAME_COLOR = colors.HexColor("#999999")
TITLE_COLOR = colors.HexColor("#2c2c2c")
SUBTITLE_COLOR = colors.HexColor("#555555")
RULE_COLOR = colors.HexColor("#cccccc")
BOX_COLOR = colors.HexColor("#aaaaaa")
LABEL_COLOR = colors.HexColor("#333333")
SIGNATURE_COLOR = colors.HexColor("#444444")
FOOTER_COLOR = colors.HexColor("#777777")


class VisitSlipRenderer:
    """Render a NormalizedAdminVisit as the printable therapy form."""

    def __init__(
        self,
        settings: Settings,
        logo_path: Optional[str] = None,
        page_compression: int = 1,
    ):
        self.title = settings.SPA_NAME
        self.subtitle = settings.SPA_TAGLINE
        self.footer = settings.SPA_FOOTER
        self.logo_path = logo_path if logo_path is not None else settings.LOGO_PATH
        self.page_compression = page_compression

        self.page_width, self.page_height = A4

    def render(self, visit: NormalizedAdminVisit) -> bytes:
        """Generate PDF and return bytes. Any failure becomes RenderError."""
        logger.info(f"📄 Generating visit slip for {visit.name} ({visit.date})")

        if self.logo_path and not os.path.exists(self.logo_path):
            raise RenderError(detail=f"Logo not found at {self.logo_path}")

        buffer = io.BytesIO()
        try:
            pdf = canvas.Canvas(
                buffer,
                pagesize=A4,
                invariant=1,
                pageCompression=self.page_compression,
            )
            pdf.setTitle(f"Therapy Form - {visit.name}")
            self._draw(pdf, visit)
            pdf.showPage()
            pdf.save()
        except Exception as e:
            logger.error(f"❌ Visit slip rendering failed: {e}", exc_info=True)
            raise RenderError(detail=str(e))

        return buffer.getvalue()

    # --- drawing helpers ---

    def _baseline(self, top: float, font_size: float) -> float:
        return self.page_height - top - font_size * 0.8

    def _text(self, pdf, text: str, x: float, top: float, font: str, size: float, color):
        pdf.setFont(font, size)
        pdf.setFillColor(color)
        pdf.drawString(x, self._baseline(top, size), text or "")

    def _rounded_rect(self, pdf, x: float, top: float, width: float, height: float, radius: float, color):
        pdf.setStrokeColor(color)
        pdf.roundRect(x, self.page_height - top - height, width, height, radius, stroke=1, fill=0)

    def _rule(self, pdf, x1: float, x2: float, top: float, color):
        pdf.setStrokeColor(color)
        pdf.line(x1, self.page_height - top, x2, self.page_height - top)

    def _field(self, pdf, label: str, value: str, x: float, top: float, width: float = 240):
        """Bold label above a 26pt rounded box, value inset."""
        self._text(pdf, label, x, top, "Helvetica-Bold", 10, LABEL_COLOR)
        self._rounded_rect(pdf, x, top + 14, width, 26, 5, BOX_COLOR)
        self._text(pdf, value, x + 8, top + 22, "Helvetica", 10, colors.black)

    def _box(self, pdf, label: str, value: str, x: float, top: float, width: float = 180, height: float = 30):
        """Service detail box: regular label, taller container."""
        self._text(pdf, label, x, top, "Helvetica", 10, LABEL_COLOR)
        self._rounded_rect(pdf, x, top + 14, width, height, 5, BOX_COLOR)
        self._text(pdf, value, x + 8, top + 24, "Helvetica", 10, LABEL_COLOR)

    # --- layout ---

    def _draw(self, pdf, visit: NormalizedAdminVisit):
        width, height = self.page_width, self.page_height
        right_col = width / 2 + 10

        pdf.setLineWidth(1)
        self._rounded_rect(pdf, MARGIN - 15, MARGIN - 15, width - 50, height - 50, 10, FRAME_COLOR)

        # Header band
        y = MARGIN
        if self.logo_path:
            logo = ImageReader(self.logo_path)
            img_w, img_h = logo.getSize()
            logo_height = LOGO_WIDTH * img_h / img_w
            pdf.drawImage(logo, MARGIN, height - y - logo_height, width=LOGO_WIDTH, height=logo_height, mask="auto")

        self._text(pdf, self.title, MARGIN + 80, y + 10, "Helvetica-Bold", 26, TITLE_COLOR)
        self._text(pdf, self.subtitle, MARGIN + 80, y + 40, "Helvetica", 10, SUBTITLE_COLOR)
        self._text(pdf, f"Date: {visit.date}", width - 180, y + 20, "Helvetica", 10, SUBTITLE_COLOR)

        y += 90
        self._rule(pdf, MARGIN, width - MARGIN, y, RULE_COLOR)
        y += 25

        # Client details
        self._field(pdf, "Client Name", visit.name, MARGIN, y)
        self._field(pdf, "Membership Card No", visit.membership, right_col, y, 200)
        y += ROW_ADVANCE
        self._field(pdf, "Room No", visit.roomNo, MARGIN, y, 150)
        y += ROW_ADVANCE
        self._field(pdf, "Address", visit.address, MARGIN, y, width - MARGIN * 2)
        y += ROW_ADVANCE
        self._field(pdf, "Contact No", visit.contact, MARGIN, y)
        self._field(pdf, "Payment Mode", visit.paymentMode, right_col, y)
        y += 70

        # Service details
        self._text(pdf, "Service Details", MARGIN, y, "Helvetica-Bold", 14, TITLE_COLOR)
        y += 15
        self._rule(pdf, MARGIN, width - MARGIN, y, RULE_COLOR)
        y += 25

        self._box(pdf, "Time In", visit.timeIn, MARGIN, y)
        self._box(pdf, "Time Out", visit.timeOut, MARGIN, y + ROW_ADVANCE)
        self._box(pdf, "Duration", visit.duration, MARGIN, y + ROW_ADVANCE * 2)
        self._box(pdf, "Price", visit.price, MARGIN, y + ROW_ADVANCE * 3)
        self._box(pdf, "Therapy Name", visit.therapyName, right_col, y, 240, 70)
        self._box(pdf, "Therapist", visit.therapist, right_col, y + 95, 240)
        y += 260

        # Signature
        self._text(pdf, "Customer Signature", width - 200, y, "Helvetica", 10, SIGNATURE_COLOR)
        self._rule(pdf, width - 260, width - MARGIN, y + 15, LABEL_COLOR)

        pdf.setFont("Helvetica", 9)
        pdf.setFillColor(FOOTER_COLOR)
        pdf.drawCentredString(width / 2, self._baseline(height - 80, 9), self.footer)
