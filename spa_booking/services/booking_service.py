import asyncio
from datetime import datetime, timezone
from typing import Callable, List, Optional

from spa_booking.core.config import Settings
from spa_booking.core.errors import NoDataError, PersistenceError
from spa_booking.core.logger import logger
from spa_booking.models.booking_models import (
    AdminVisitRequest,
    BookingRequest,
    LedgerKind,
    LedgerScope,
    NormalizedBooking,
    SubmissionReceipt,
)
from spa_booking.services.export_service import ReportKind, export_rows
from spa_booking.services.notification_service import Notifier, format_booking_summary
from spa_booking.services.pdf_service import VisitSlipRenderer
from spa_booking.services.sheets_service import SheetsLedger
from spa_booking.services.validator import validate_admin_visit, validate_booking

SCOPE_REPORTS = {
    LedgerScope.TODAY: ReportKind.BOOKINGS,
    LedgerScope.ALL: ReportKind.BOOKINGS,
    LedgerScope.ADMIN: ReportKind.ADMIN,
}


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix, e.g. 2025-01-01T10:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BookingService:
    """
    Submission and reporting pipeline.

    The ledger append is the durability boundary: if it fails the request
    fails. Notifications run only after a successful append and their
    failures are logged without changing the outcome.
    """

    def __init__(
        self,
        settings: Settings,
        ledger: Optional[SheetsLedger] = None,
        notifier: Optional[Notifier] = None,
        renderer: Optional[VisitSlipRenderer] = None,
        exporter: Callable[[ReportKind, List[List[str]]], bytes] = export_rows,
    ):
        self.settings = settings
        self.ledger = ledger or SheetsLedger(settings)
        self.notifier = notifier or Notifier(settings)
        self.renderer = renderer or VisitSlipRenderer(settings)
        self.exporter = exporter

    async def submit_booking(self, request: BookingRequest) -> SubmissionReceipt:
        booking = validate_booking(request, timestamp=iso_timestamp())
        logger.info(f"📥 Booking Request - {booking.firstName}, {booking.service} on {booking.date} {booking.time}")

        result = await self.ledger.append(LedgerKind.BOOKINGS, booking)
        if not result.success:
            logger.error(f"❌ Booking not saved to sheet: {result.error}")
            raise PersistenceError(detail=result.error)

        await self.send_notifications(booking)

        return SubmissionReceipt(id=result.row_number, timestamp=booking.timestamp)

    async def send_notifications(self, booking: NormalizedBooking):
        """
        Email to the owner, then WhatsApp alert to the admin number.
        Each channel is attempted independently; errors never propagate.
        """
        try:
            await asyncio.to_thread(self.notifier.send_generic, booking)
        except Exception as e:
            logger.error(f"❌ Email notification failed: {getattr(e, 'detail', None) or e}")

        try:
            await asyncio.to_thread(
                self.notifier.send_templated,
                self.settings.ADMIN_WA_NUMBER,
                self.settings.WA_TEMPLATE_NAME,
                [format_booking_summary(booking)],
            )
        except Exception as e:
            logger.error(f"❌ WhatsApp notification failed: {getattr(e, 'detail', None) or e}")

    async def submit_admin_visit(self, request: AdminVisitRequest) -> bytes:
        """Save a staff-entered visit and return its visit slip PDF."""
        visit = validate_admin_visit(request)
        logger.info(f"📥 Admin visit - {visit.name}, {visit.therapyName} on {visit.date}")

        result = await self.ledger.append(LedgerKind.ADMIN, visit)
        if not result.success:
            logger.error(f"❌ Admin visit not saved to sheet: {result.error}")
            raise PersistenceError(detail=result.error)

        return await asyncio.to_thread(self.renderer.render, visit)

    async def export_report(self, scope: LedgerScope) -> bytes:
        rows = await self.ledger.get_rows(scope)
        if not rows or len(rows) <= 1:
            logger.info(f"ℹ️ Nothing to export for scope '{scope.value}'")
            raise NoDataError()

        return self.exporter(SCOPE_REPORTS[scope], rows)

    async def get_stats(self) -> int:
        """Number of bookings submitted today (header row excluded)."""
        rows = await self.ledger.get_rows(LedgerScope.TODAY)
        return max(len(rows) - 1, 0)
