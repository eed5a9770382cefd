import io
from enum import Enum
from typing import List, Sequence

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from spa_booking.core.logger import logger


class ReportKind(str, Enum):
    BOOKINGS = "bookings"
    ADMIN = "admin"


# Header rows follow the ledger column order of each record type
REPORT_HEADERS = {
    ReportKind.BOOKINGS: [
        "Timestamp", "Service", "Date", "Time", "First Name", "Email", "Phone", "Message",
    ],
    ReportKind.ADMIN: [
        "Client Name", "Room No", "Address", "Contact No", "Payment Mode", "Time In", "Time Out",
        "Therapy Name", "Duration", "Therapist", "Date", "Membership Card No", "Price",
    ],
}

SHEET_TITLES = {
    ReportKind.BOOKINGS: "Bookings",
    ReportKind.ADMIN: "Customer Visits",
}

HEADER_FONT = Font(name='Calibri', bold=True, size=11, color='FFFFFF')
HEADER_FILL = PatternFill(start_color='2F5496', end_color='2F5496', fill_type='solid')
BODY_FONT = Font(name='Calibri', size=10)
THIN_BORDER = Border(
    left=Side(style='thin'), right=Side(style='thin'),
    top=Side(style='thin'), bottom=Side(style='thin')
)
MAX_COLUMN_WIDTH = 50


def _style_header(ws, max_col: int):
    for col in range(1, max_col + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(vertical='center', horizontal='center')
        cell.border = THIN_BORDER


def _auto_width(ws, max_col: int):
    for col in range(1, max_col + 1):
        max_len = 0
        for row in ws.iter_rows(min_row=1, max_row=ws.max_row, min_col=col, max_col=col):
            for cell in row:
                if cell.value:
                    max_len = max(max_len, min(len(str(cell.value)), MAX_COLUMN_WIDTH))
        ws.column_dimensions[get_column_letter(col)].width = max(max_len + 2, 12)


def export_rows(kind: ReportKind, rows: Sequence[Sequence]) -> bytes:
    """
    Turn ledger rows into an .xlsx workbook.

    Row 0 of `rows` is the ledger header and is replaced by the fixed header
    for `kind`. Data rows are written as-is in ledger column order; their
    contents are not validated. Header-only or empty input still produces
    a valid workbook containing just the header.
    """
    headers: List[str] = REPORT_HEADERS[kind]
    data_rows = list(rows[1:]) if rows else []

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = SHEET_TITLES[kind]

    ws.append(headers)
    for row in data_rows:
        values = ["" if value is None else value for value in row]
        if len(values) < len(headers):
            values += [""] * (len(headers) - len(values))
        ws.append(values)
        # Submitted text starting with "=" stays text, never a formula
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, str) and cell.value.startswith("="):
                cell.data_type = "s"

    max_col = max(len(headers), ws.max_column)
    _style_header(ws, len(headers))
    for row in ws.iter_rows(min_row=2, max_row=ws.max_row, max_col=max_col):
        for cell in row:
            cell.font = BODY_FONT
            cell.border = THIN_BORDER
    ws.freeze_panes = "A2"
    _auto_width(ws, max_col)

    buffer = io.BytesIO()
    wb.save(buffer)
    logger.info(f"📊 Exported {len(data_rows)} {kind.value} rows to Excel")
    return buffer.getvalue()
