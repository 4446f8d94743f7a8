"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a shared backend because:
1. Members can look at the fund's books directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a festival fund is tiny)
- No transactions (each save rewrites one worksheet)
- Every cell comes back as text; the ledger store re-validates it

Each collection key maps to one worksheet: a header row of field names,
then one row per entry.
"""

from typing import Any, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from velam.config import GoogleSheetsSettings, get_settings
from velam.services.storage.interface import (
    Collection,
    ConnectionError,
    CorruptDataError,
    PersistencePort,
    StorageError,
)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet lookup. Only the connection
    handshake is retried; writes surface their first failure.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=SCOPES,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

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
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def find_worksheet(self, title: str) -> Optional[gspread.Worksheet]:
        """Get a worksheet by title, or None if it doesn't exist yet."""
        spreadsheet = self.get_spreadsheet()
        try:
            return spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            return None

    def get_or_create_worksheet(self, title: str, cols: int) -> gspread.Worksheet:
        """Get a worksheet, creating an empty one if needed."""
        sheet = self.find_worksheet(title)
        if sheet is None:
            sheet = self.get_spreadsheet().add_worksheet(
                title=title,
                rows=1000,
                cols=max(cols, 1),
            )
        return sheet


def _collection_columns(value: Collection) -> list[str]:
    """Union of all field names, in first-seen order."""
    columns: list[str] = []
    for entry in value:
        for name in entry:
            if name not in columns:
                columns.append(name)
    return columns


def _to_cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


class GoogleSheetsStorage(PersistencePort):
    """
    Google Sheets implementation of the persistence port.

    A save writes the whole collection over the worksheet from A1, then
    trims the grid to the new size, matching the full-rewrite semantics of
    the other backends. If the write fails the previous rows remain.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def load(self, key: str) -> Optional[Collection]:
        try:
            sheet = self._client.find_worksheet(key)
            if sheet is None:
                return None
            rows = sheet.get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load collection {key}: {e}")

        if not rows:
            return []

        header = rows[0]
        if any(not name for name in header):
            raise CorruptDataError(f"Worksheet {key} has a blank header cell")

        collection = []
        for row in rows[1:]:
            if not any(row):  # Skip blank rows left by manual edits
                continue
            padded = list(row) + [""] * (len(header) - len(row))
            collection.append({
                name: (cell if cell != "" else None)
                for name, cell in zip(header, padded)
            })
        return collection

    def save(self, key: str, value: Collection) -> None:
        columns = _collection_columns(value)
        rows = [columns] + [
            [_to_cell(entry.get(name)) for name in columns]
            for entry in value
        ]

        try:
            sheet = self._client.get_or_create_worksheet(key, cols=len(columns))
            if not value:
                sheet.clear()
                return

            # Old rows stay in place until the new ones are written
            sheet.resize(
                rows=max(sheet.row_count, len(rows)),
                cols=max(sheet.col_count, len(columns)),
            )
            sheet.update(range_name="A1", values=rows, value_input_option="RAW")
            sheet.resize(rows=len(rows), cols=len(columns))
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save collection {key}: {e}")
