import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from spa_booking.core.errors import (
    InvalidPhoneError,
    MissingFieldsError,
    NoDataError,
    NotificationError,
    PersistenceError,
    RenderError,
)
from spa_booking.models.booking_models import (
    AdminVisitRequest,
    AppendResult,
    BookingRequest,
    LedgerKind,
    LedgerScope,
)
from spa_booking.services.booking_service import BookingService, iso_timestamp
from spa_booking.services.export_service import ReportKind

HEADER = ["timestamp", "service", "date", "time", "firstName", "email", "phone", "message"]
ROW = ["2025-01-01T09:00:00.000Z", "Massage", "2025-01-01", "10:00", "Ana", "N/A", "555-1234", ""]


def make_service(settings, append_result=None, rows=None):
    ledger = MagicMock()
    ledger.append = AsyncMock(return_value=append_result or AppendResult(success=True, row_number=7))
    ledger.get_rows = AsyncMock(return_value=rows if rows is not None else [HEADER])
    notifier = MagicMock()
    renderer = MagicMock()
    renderer.render.return_value = b"%PDF-fake"
    exporter = MagicMock(return_value=b"xlsx-bytes")
    service = BookingService(settings, ledger=ledger, notifier=notifier, renderer=renderer, exporter=exporter)
    return service, ledger, notifier, renderer, exporter


def booking_request(**overrides):
    data = {"service": "Massage", "date": "2025-01-01", "time": "10:00", "firstName": "Ana", "phone": "555-1234"}
    data.update(overrides)
    return BookingRequest(**data)


def test_iso_timestamp_format():
    ts = iso_timestamp(datetime(2025, 1, 1, 10, 0, 0, 123000, tzinfo=timezone.utc))
    assert ts == "2025-01-01T10:00:00.123Z"


@pytest.mark.asyncio
async def test_submit_booking_success(settings):
    service, ledger, notifier, _, _ = make_service(settings)

    receipt = await service.submit_booking(booking_request())

    assert receipt.id == 7
    assert receipt.timestamp.endswith("Z")
    kind, record = ledger.append.call_args.args
    assert kind == LedgerKind.BOOKINGS
    assert record.email == "N/A"
    notifier.send_generic.assert_called_once_with(record)
    to, template, params = notifier.send_templated.call_args.args
    assert to == "+919999999999"
    assert template == "form_submission_alert"
    assert "Ana" in params[0] and "No message" in params[0]


@pytest.mark.asyncio
async def test_missing_field_has_no_side_effects(settings):
    service, ledger, notifier, _, _ = make_service(settings)

    with pytest.raises(MissingFieldsError):
        await service.submit_booking(booking_request(time=None))

    ledger.append.assert_not_called()
    notifier.send_generic.assert_not_called()
    notifier.send_templated.assert_not_called()


@pytest.mark.asyncio
async def test_bad_phone_has_no_side_effects(settings):
    service, ledger, notifier, _, _ = make_service(settings)

    with pytest.raises(InvalidPhoneError):
        await service.submit_booking(booking_request(phone="abc123"))

    ledger.append.assert_not_called()
    notifier.send_generic.assert_not_called()


@pytest.mark.asyncio
async def test_ledger_failure_skips_notifications(settings):
    service, _, notifier, _, _ = make_service(settings, append_result=AppendResult(success=False, error="quota"))

    with pytest.raises(PersistenceError) as exc:
        await service.submit_booking(booking_request())

    assert exc.value.detail == "quota"
    notifier.send_generic.assert_not_called()
    notifier.send_templated.assert_not_called()


@pytest.mark.asyncio
async def test_notification_failures_do_not_change_outcome(settings):
    service, _, notifier, _, _ = make_service(settings, append_result=AppendResult(success=True, row_number=42))
    notifier.send_generic.side_effect = NotificationError(detail="smtp down")
    notifier.send_templated.side_effect = RuntimeError("graph api 500")

    receipt = await service.submit_booking(booking_request())

    assert receipt.id == 42
    # The WhatsApp attempt still happens after the email failed
    notifier.send_templated.assert_called_once()


@pytest.mark.asyncio
async def test_admin_visit_returns_pdf(settings):
    service, ledger, notifier, renderer, _ = make_service(settings)
    req = AdminVisitRequest(name="Ana", therapyName="Thai Massage", date="2025-01-01", price="1500", paymentMode="Cash")

    pdf = await service.submit_admin_visit(req)

    assert pdf == b"%PDF-fake"
    assert ledger.append.call_args.args[0] == LedgerKind.ADMIN
    renderer.render.assert_called_once()
    notifier.send_generic.assert_not_called()
    notifier.send_templated.assert_not_called()


@pytest.mark.asyncio
async def test_admin_visit_ledger_failure_never_renders(settings):
    service, _, _, renderer, _ = make_service(settings, append_result=AppendResult(success=False, error="boom"))
    req = AdminVisitRequest(name="Ana", therapyName="Thai Massage", date="2025-01-01", price="1500", paymentMode="Cash")

    with pytest.raises(PersistenceError):
        await service.submit_admin_visit(req)
    renderer.render.assert_not_called()


@pytest.mark.asyncio
async def test_admin_visit_render_failure_propagates(settings):
    service, _, _, renderer, _ = make_service(settings)
    renderer.render.side_effect = RenderError(detail="logo missing")
    req = AdminVisitRequest(name="Ana", therapyName="Thai Massage", date="2025-01-01", price="1500", paymentMode="Cash")

    with pytest.raises(RenderError):
        await service.submit_admin_visit(req)


@pytest.mark.asyncio
@pytest.mark.parametrize("rows", [[], [HEADER]])
@pytest.mark.parametrize("scope", list(LedgerScope))
async def test_export_without_data(settings, rows, scope):
    service, _, _, _, exporter = make_service(settings, rows=rows)

    with pytest.raises(NoDataError):
        await service.export_report(scope)
    exporter.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("scope,kind", [
    (LedgerScope.TODAY, ReportKind.BOOKINGS),
    (LedgerScope.ALL, ReportKind.BOOKINGS),
    (LedgerScope.ADMIN, ReportKind.ADMIN),
])
async def test_export_uses_report_kind_for_scope(settings, scope, kind):
    service, ledger, _, _, exporter = make_service(settings, rows=[HEADER, ROW])

    content = await service.export_report(scope)

    assert content == b"xlsx-bytes"
    ledger.get_rows.assert_awaited_once_with(scope)
    exporter.assert_called_once_with(kind, [HEADER, ROW])


@pytest.mark.asyncio
@pytest.mark.parametrize("rows,expected", [
    ([], 0),
    ([HEADER], 0),
    ([HEADER, ROW], 1),
    ([HEADER, ROW, ROW, ROW], 3),
])
async def test_stats_count(settings, rows, expected):
    service, ledger, _, _, _ = make_service(settings, rows=rows)

    assert await service.get_stats() == expected
    ledger.get_rows.assert_awaited_once_with(LedgerScope.TODAY)
