"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the storage backend because:
1. The user can open and edit their entries directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Receipts land in Drive next to the spreadsheet

TRADEOFFS:
- No transactions (we rely on careful ordering: row first, receipt later)
- No locking (two concurrent writers both append, last delete wins)
- Every read fetches the whole sheet (fine for a personal ledger)

Operations are attempted exactly once; failures surface as StorageError.
"""

from typing import Any, Optional, Sequence

import gspread
from gspread.utils import DateTimeOption, ValueInputOption, ValueRenderOption, rowcol_to_a1
from google.oauth2.service_account import Credentials

from money_tracker.config import get_settings
from money_tracker.models.entry import SHEET_NAME
from money_tracker.services.storage.interface import (
    NotFoundError,
    StorageError,
    StorageUnavailableError,
    TableStorageInterface,
)


SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and hands out the spreadsheet handle.
    The same service-account credentials are reused for Drive.
    """

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        spreadsheet_id: Optional[str] = None,
    ):
        if credentials_path is None or spreadsheet_id is None:
            settings = get_settings().google_sheets
            credentials_path = credentials_path or settings.credentials_path
            spreadsheet_id = spreadsheet_id or settings.spreadsheet_id
        self._credentials_path = credentials_path
        self._spreadsheet_id = spreadsheet_id
        self._credentials: Optional[Credentials] = None
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None

    @property
    def spreadsheet_id(self) -> str:
        return self._spreadsheet_id

    @property
    def credentials(self) -> Credentials:
        """Service-account credentials with Sheets and Drive scopes."""
        if self._credentials is None:
            try:
                self._credentials = Credentials.from_service_account_file(
                    self._credentials_path,
                    scopes=SCOPES,
                )
            except FileNotFoundError:
                raise StorageUnavailableError(
                    f"Google credentials file not found: {self._credentials_path}"
                )
            except Exception as e:
                raise StorageUnavailableError(f"Invalid Google credentials: {e}")
        return self._credentials

    def connect(self) -> gspread.Client:
        """Establish connection to Google Sheets."""
        if self._client is None:
            try:
                self._client = gspread.authorize(self.credentials)
            except StorageError:
                raise
            except Exception as e:
                raise StorageUnavailableError(f"Failed to connect to Google Sheets: {e}")
        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(self._spreadsheet_id)
            except gspread.SpreadsheetNotFound:
                raise StorageUnavailableError(
                    f"Spreadsheet not found: {self._spreadsheet_id}"
                )
            except gspread.exceptions.APIError as e:
                raise StorageUnavailableError(f"Failed to open spreadsheet: {e}")
        return self._spreadsheet


class GoogleSheetsTable(TableStorageInterface):
    """
    One worksheet of the spreadsheet exposed as a table.

    gspread rows and columns are 1-based; the interface is 0-based,
    so every call adds one.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        sheet_name: str = SHEET_NAME,
    ):
        self._client = client or GoogleSheetsClient()
        self._sheet_name = sheet_name
        self._sheet: Optional[gspread.Worksheet] = None

    @property
    def name(self) -> str:
        return self._sheet_name

    def _find_sheet(self) -> Optional[gspread.Worksheet]:
        if self._sheet is None:
            spreadsheet = self._client.get_spreadsheet()
            try:
                self._sheet = spreadsheet.worksheet(self._sheet_name)
            except gspread.WorksheetNotFound:
                return None
            except gspread.exceptions.APIError as e:
                raise StorageUnavailableError(f"Failed to open sheet {self._sheet_name}: {e}")
        return self._sheet

    def _require_sheet(self) -> gspread.Worksheet:
        sheet = self._find_sheet()
        if sheet is None:
            raise NotFoundError(f"Sheet not found: {self._sheet_name}")
        return sheet

    def exists(self) -> bool:
        return self._find_sheet() is not None

    def create(self, header: Sequence[str], column_widths: Sequence[int]) -> None:
        """Create the worksheet with the header row, frozen, and sized columns."""
        spreadsheet = self._client.get_spreadsheet()
        try:
            sheet = spreadsheet.add_worksheet(
                title=self._sheet_name,
                rows=1000,
                cols=len(header),
            )
            sheet.append_row(list(header), value_input_option="RAW")
            sheet.freeze(rows=1)
            requests = [
                {
                    "updateDimensionProperties": {
                        "range": {
                            "sheetId": sheet.id,
                            "dimension": "COLUMNS",
                            "startIndex": index,
                            "endIndex": index + 1,
                        },
                        "properties": {"pixelSize": width},
                        "fields": "pixelSize",
                    }
                }
                for index, width in enumerate(column_widths)
            ]
            if requests:
                spreadsheet.batch_update({"requests": requests})
        except gspread.exceptions.APIError as e:
            raise StorageError(f"Failed to create sheet {self._sheet_name}: {e}")
        self._sheet = sheet

    def read_rows(self) -> list[list[Any]]:
        """
        All rows as unformatted values.

        Numbers come back as numbers and date cells as serial numbers,
        so rows typed in by hand or written by older clients parse the
        same as rows this service wrote.
        """
        try:
            return self._require_sheet().get_all_values(
                value_render_option=ValueRenderOption.unformatted,
                date_time_render_option=DateTimeOption.serial_number,
            )
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageUnavailableError(f"Failed to read sheet {self._sheet_name}: {e}")

    def append_row(self, values: Sequence[Any]) -> None:
        try:
            self._require_sheet().append_row(list(values), value_input_option="RAW")
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to append row: {e}")

    def delete_row(self, index: int) -> None:
        try:
            self._require_sheet().delete_rows(index + 1)
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete row {index}: {e}")

    def write_cell(self, row_index: int, column_index: int, value: Any) -> None:
        try:
            self._require_sheet().update_cell(row_index + 1, column_index + 1, value)
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write cell ({row_index}, {column_index}): {e}")

    def write_row(self, row_index: int, values: Sequence[Any]) -> None:
        """Overwrite the leading cells of one row in a single update."""
        values = list(values)
        if not values:
            return
        range_name = (
            f"{rowcol_to_a1(row_index + 1, 1)}:{rowcol_to_a1(row_index + 1, len(values))}"
        )
        try:
            self._require_sheet().update(
                values=[values],
                range_name=range_name,
                value_input_option=ValueInputOption.raw,
            )
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write row {row_index}: {e}")
