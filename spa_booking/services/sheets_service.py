import asyncio
import json
import os
import re
from datetime import datetime, timezone
from typing import List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from spa_booking.core.config import Settings
from spa_booking.core.errors import PersistenceError
from spa_booking.core.logger import logger
from spa_booking.models.booking_models import AppendResult, LedgerKind, LedgerScope

SCOPES = ['https://www.googleapis.com/auth/spreadsheets']

UPDATED_RANGE_RE = re.compile(r"![A-Z]+(\d+)")


def utc_today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def row_number_from_range(updated_range: Optional[str]) -> Optional[int]:
    """'Sheet1!A5:H5' -> 5"""
    if not updated_range:
        return None
    match = UPDATED_RANGE_RE.search(updated_range)
    return int(match.group(1)) if match else None


class SheetsLedger:
    """
    Append-and-read access to the Google Sheet that acts as the only
    persistent record. Bookings and admin visits live in separate tabs.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def _sheet_name(self, kind: LedgerKind) -> str:
        if kind == LedgerKind.ADMIN:
            return self.settings.ADMIN_SHEET_NAME
        return self.settings.BOOKINGS_SHEET_NAME

    def get_sheets_service(self):
        """
        Authenticate and return the Sheets API service.
        Credentials come from the credentials file (local development) or the
        GOOGLE_CREDENTIALS_JSON variable (cloud deployment).
        Returns None if credentials are missing.
        """
        creds = None
        credentials_file = self.settings.GOOGLE_CREDENTIALS_FILE

        if credentials_file and os.path.exists(credentials_file):
            logger.debug(f"🔑 Loading credentials from file: {credentials_file}")
            creds = service_account.Credentials.from_service_account_file(
                credentials_file, scopes=SCOPES
            )
        elif self.settings.GOOGLE_CREDENTIALS_JSON:
            logger.debug("🔑 Loading credentials from Environment Variable")
            info = json.loads(self.settings.GOOGLE_CREDENTIALS_JSON)
            creds = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
        else:
            logger.warning("⚠️ No Google credentials found (file or env).")
            return None

        return build('sheets', 'v4', credentials=creds, cache_discovery=False)

    async def append(self, kind: LedgerKind, record) -> AppendResult:
        """
        Append one record as a new row. Never raises: failures come back as
        AppendResult(success=False, error=...).
        """
        sheet_name = self._sheet_name(kind)
        row = record.as_row()

        def _append() -> AppendResult:
            if not self.settings.SHEET_ID:
                return AppendResult(success=False, error="SHEET_ID is not configured")
            try:
                service = self.get_sheets_service()
                if not service:
                    return AppendResult(success=False, error="Google Sheets credentials missing")

                result = service.spreadsheets().values().append(
                    spreadsheetId=self.settings.SHEET_ID,
                    range=f"{sheet_name}!A1",
                    valueInputOption="RAW",
                    insertDataOption="INSERT_ROWS",
                    body={"values": [row]},
                ).execute()

                updated_range = result.get("updates", {}).get("updatedRange")
                row_number = row_number_from_range(updated_range)
                logger.info(f"📝 Row appended to '{sheet_name}' ({updated_range})")
                return AppendResult(success=True, row_number=row_number)
            except HttpError as error:
                logger.error(f"❌ Google API Error (append): {error}")
                return AppendResult(success=False, error=str(error))
            except Exception as e:
                logger.error(f"❌ Error appending to sheet '{sheet_name}': {e}")
                return AppendResult(success=False, error=str(e))

        return await asyncio.to_thread(_append)

    async def get_rows(self, scope: LedgerScope, today: Optional[str] = None) -> List[List[str]]:
        """
        Read rows for a scope. Row 0 is the sheet header.
        TODAY keeps the header plus bookings whose timestamp starts with today's UTC date.
        Raises PersistenceError when the sheet cannot be read.
        """
        kind = LedgerKind.ADMIN if scope == LedgerScope.ADMIN else LedgerKind.BOOKINGS
        sheet_name = self._sheet_name(kind)

        def _read() -> List[List[str]]:
            if not self.settings.SHEET_ID:
                raise PersistenceError(detail="SHEET_ID is not configured")
            try:
                service = self.get_sheets_service()
                if not service:
                    raise PersistenceError(detail="Google Sheets credentials missing")
                result = service.spreadsheets().values().get(
                    spreadsheetId=self.settings.SHEET_ID,
                    range=sheet_name,
                ).execute()
            except PersistenceError:
                raise
            except HttpError as error:
                logger.error(f"❌ Google API Error (read '{sheet_name}'): {error}")
                raise PersistenceError(detail=str(error))
            except Exception as e:
                logger.error(f"❌ Error reading sheet '{sheet_name}': {e}")
                raise PersistenceError(detail=str(e))
            return result.get("values", [])

        rows = await asyncio.to_thread(_read)

        if scope != LedgerScope.TODAY or not rows:
            return rows

        day = today or utc_today()
        header, data = rows[0], rows[1:]
        return [header] + [row for row in data if row and str(row[0]).startswith(day)]
