"""
Google Sheets Slot Storage

DESIGN DECISION: Google Sheets is offered as a slot backend because:
1. Non-technical users can look at their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

Each slot is one row of the slots worksheet: [slot, payload, updated_at].
The payload is the slot's JSON text.

TRADEOFFS:
- A cell holds at most 50,000 characters, so very large ledgers will not fit
- No transactions (each slot row is updated on its own)
"""

from datetime import datetime
from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials

from ledger.config import GoogleSheetsSettings, get_settings
from ledger.models.results import SlotName
from ledger.services.storage.interface import (
    SlotReadError,
    SlotStorageInterface,
    SlotWriteError,
    StorageConnectionError,
)


logger = structlog.get_logger(__name__)

SLOT_COLUMNS = ["slot", "payload", "updated_at"]

MAX_CELL_CHARS = 50000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and lazily opens the slots worksheet.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_slots_sheet(self) -> gspread.Worksheet:
        """Get or create the slots worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.slots_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.slots_sheet_name,
                rows=10,
                cols=len(SLOT_COLUMNS),
            )
            sheet.append_row(SLOT_COLUMNS)
        return sheet


class GoogleSheetsSlotStorage(SlotStorageInterface):
    """Google Sheets implementation of slot storage."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet, slot: SlotName) -> tuple[Optional[int], Optional[list]]:
        """Return (1-based row index, row values) of a slot, skipping the header."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == slot.value:
                return idx, row
        return None, None

    def read_slot(self, slot: SlotName) -> Optional[bytes]:
        try:
            sheet = self._client.get_slots_sheet()
            _, row = self._find_row(sheet, slot)
        except Exception as e:
            raise SlotReadError(f"Failed to read slot {slot.value}: {e}")

        if row is None or len(row) < 2 or not row[1]:
            return None
        return row[1].encode("utf-8")

    def write_slot(self, slot: SlotName, data: bytes) -> None:
        payload = data.decode("utf-8")
        if len(payload) > MAX_CELL_CHARS:
            raise SlotWriteError(
                f"Slot {slot.value} is {len(payload)} characters, "
                f"over the {MAX_CELL_CHARS} character cell limit"
            )

        try:
            sheet = self._client.get_slots_sheet()
            idx, _ = self._find_row(sheet, slot)
            row = [slot.value, payload, datetime.utcnow().isoformat()]
            if idx is None:
                sheet.append_row(row, value_input_option="RAW")
            else:
                for col_idx, value in enumerate(row, start=1):
                    sheet.update_cell(idx, col_idx, value)
        except Exception as e:
            raise SlotWriteError(f"Failed to write slot {slot.value}: {e}")

        logger.debug("sheets_slot_written", slot=slot.value, chars=len(payload))

    def delete_slot(self, slot: SlotName) -> None:
        try:
            sheet = self._client.get_slots_sheet()
            idx, _ = self._find_row(sheet, slot)
            if idx is not None:
                sheet.delete_rows(idx)
        except Exception as e:
            raise SlotWriteError(f"Failed to delete slot {slot.value}: {e}")
