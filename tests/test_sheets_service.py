import pytest
from unittest.mock import MagicMock, patch

from conftest import build_settings
from spa_booking.core.errors import PersistenceError
from spa_booking.models.booking_models import LedgerKind, LedgerScope, NormalizedAdminVisit, NormalizedBooking
from spa_booking.services.sheets_service import SheetsLedger, row_number_from_range

BOOKING = NormalizedBooking(
    timestamp="2025-01-01T09:00:00.000Z",
    service="Massage",
    date="2025-01-01",
    time="10:00",
    firstName="Ana",
    phone="555-1234",
)

HEADER = ["timestamp", "service", "date", "time", "firstName", "email", "phone", "message"]


def fake_service(append_response=None, get_response=None, error=None):
    service = MagicMock()
    values = service.spreadsheets.return_value.values.return_value
    values.append.return_value.execute.return_value = append_response or {}
    values.get.return_value.execute.return_value = get_response or {}
    if error:
        values.append.return_value.execute.side_effect = error
        values.get.return_value.execute.side_effect = error
    return service, values


def test_row_number_from_range():
    assert row_number_from_range("Sheet1!A5:H5") == 5
    assert row_number_from_range("'Admin'!A12:M12") == 12
    assert row_number_from_range(None) is None


@pytest.mark.asyncio
async def test_append_booking(settings):
    service, values = fake_service(append_response={"updates": {"updatedRange": "Sheet1!A8:H8"}})
    ledger = SheetsLedger(settings)

    with patch.object(SheetsLedger, "get_sheets_service", return_value=service):
        result = await ledger.append(LedgerKind.BOOKINGS, BOOKING)

    assert result.success is True
    assert result.row_number == 8
    kwargs = values.append.call_args.kwargs
    assert kwargs["spreadsheetId"] == "sheet-123"
    assert kwargs["range"] == "Sheet1!A1"
    assert kwargs["body"] == {"values": [BOOKING.as_row()]}


@pytest.mark.asyncio
async def test_append_admin_uses_admin_tab(settings):
    service, values = fake_service(append_response={"updates": {"updatedRange": "Admin!A3:M3"}})
    visit = NormalizedAdminVisit(name="Ana", paymentMode="Cash", therapyName="Thai", date="2025-01-01", price="900")

    with patch.object(SheetsLedger, "get_sheets_service", return_value=service):
        result = await SheetsLedger(settings).append(LedgerKind.ADMIN, visit)

    assert result.row_number == 3
    assert values.append.call_args.kwargs["range"] == "Admin!A1"


@pytest.mark.asyncio
async def test_append_failure_is_reported_not_raised(settings):
    service, _ = fake_service(error=RuntimeError("quota exceeded"))

    with patch.object(SheetsLedger, "get_sheets_service", return_value=service):
        result = await SheetsLedger(settings).append(LedgerKind.BOOKINGS, BOOKING)

    assert result.success is False
    assert "quota exceeded" in result.error


@pytest.mark.asyncio
async def test_append_without_credentials(settings):
    with patch.object(SheetsLedger, "get_sheets_service", return_value=None):
        result = await SheetsLedger(settings).append(LedgerKind.BOOKINGS, BOOKING)
    assert result.success is False


@pytest.mark.asyncio
async def test_append_without_sheet_id():
    result = await SheetsLedger(build_settings(SHEET_ID="")).append(LedgerKind.BOOKINGS, BOOKING)
    assert result.success is False
    assert "SHEET_ID" in result.error


@pytest.mark.asyncio
async def test_get_rows_today_filters_by_timestamp(settings):
    rows = [
        HEADER,
        ["2025-01-01T09:00:00.000Z", "Massage"],
        ["2024-12-31T23:59:00.000Z", "Facial"],
        ["2025-01-01T15:30:00.000Z", "Scrub"],
        [],
    ]
    service, values = fake_service(get_response={"values": rows})

    with patch.object(SheetsLedger, "get_sheets_service", return_value=service):
        result = await SheetsLedger(settings).get_rows(LedgerScope.TODAY, today="2025-01-01")

    assert result == [HEADER, rows[1], rows[3]]
    assert values.get.call_args.kwargs["range"] == "Sheet1"


@pytest.mark.asyncio
async def test_get_rows_all_and_admin(settings):
    rows = [HEADER, ["2024-12-31T23:59:00.000Z", "Facial"]]
    service, values = fake_service(get_response={"values": rows})

    with patch.object(SheetsLedger, "get_sheets_service", return_value=service):
        ledger = SheetsLedger(settings)
        assert await ledger.get_rows(LedgerScope.ALL) == rows
        await ledger.get_rows(LedgerScope.ADMIN)

    assert values.get.call_args.kwargs["range"] == "Admin"


@pytest.mark.asyncio
async def test_get_rows_empty_sheet(settings):
    service, _ = fake_service(get_response={})

    with patch.object(SheetsLedger, "get_sheets_service", return_value=service):
        assert await SheetsLedger(settings).get_rows(LedgerScope.TODAY) == []


@pytest.mark.asyncio
async def test_get_rows_without_credentials_raises(settings):
    with patch.object(SheetsLedger, "get_sheets_service", return_value=None):
        with pytest.raises(PersistenceError):
            await SheetsLedger(settings).get_rows(LedgerScope.ALL)


@pytest.mark.asyncio
async def test_get_rows_api_failure_raises(settings):
    service, _ = fake_service(error=RuntimeError("socket closed"))

    with patch.object(SheetsLedger, "get_sheets_service", return_value=service):
        with pytest.raises(PersistenceError) as exc:
            await SheetsLedger(settings).get_rows(LedgerScope.ALL)
    assert "socket closed" in exc.value.detail
