"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the hosted store because:
1. The owners can look at the raw cash book directly in Sheets
2. No database server to run
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a household cash book is tiny)
- No transactions: last write wins
- Limited query capabilities: every read fetches the full worksheet

One worksheet per collection, one record per row, header row first.
The store assigns ids on append. Data operations are NOT retried: a
transport failure surfaces once as StoreUnavailableError and the caller
decides whether to re-read.
"""

from datetime import date
from enum import Enum
from typing import Any, Generic, Optional
from uuid import uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import GoogleSheetsSettings, get_settings
from src.models.ledger import (
    Booking,
    BookingDraft,
    Entry,
    EntryDraft,
    UpcomingExpense,
    UpcomingExpenseDraft,
)
from src.services.storage.interface import (
    BookingStoreInterface,
    EntryStoreInterface,
    NotFoundError,
    RecordT,
    StorageError,
    StoreConfigurationError,
    StoreUnavailableError,
    UpcomingExpenseStoreInterface,
    merge_fields,
)

logger = structlog.get_logger(__name__)


# Column layouts; the first column is always the id
ENTRY_COLUMNS = ["id", "date", "type", "amount", "description"]
BOOKING_COLUMNS = ["id", "source", "description", "start_date", "end_date", "completed"]
UPCOMING_EXPENSE_COLUMNS = ["id", "date", "description", "amount", "type"]


def to_cell(value: Any) -> str:
    """Serialize one field for a RAW write."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication, the HTTP timeout and worksheet lookup.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(StoreConfigurationError),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication. A missing
        credentials file fails on the first attempt; other failures are
        retried.
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
                client = gspread.authorize(credentials)
                client.set_timeout(self._settings.request_timeout_seconds)
                self._client = client
            except FileNotFoundError:
                raise StoreConfigurationError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreUnavailableError(f"Failed to connect to Google Sheets: {e}")

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
                raise StoreUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        """Get or create a worksheet with the given header row."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet


class SheetCollection(Generic[RecordT]):
    """
    One collection stored in one worksheet.

    Rows are mapped to records by column name. Date columns are read by
    their first ten characters, so ISO timestamps written by older
    clients still parse as calendar dates.
    """

    def __init__(
        self,
        client: GoogleSheetsClient,
        sheet_name: str,
        record_type: type[RecordT],
        columns: list[str],
        date_columns: tuple[str, ...] = (),
    ):
        self._client = client
        self._sheet_name = sheet_name
        self._record_type = record_type
        self._columns = columns
        self._date_columns = date_columns

    @property
    def name(self) -> str:
        return self._sheet_name

    def _sheet(self) -> gspread.Worksheet:
        return self._client.get_worksheet(self._sheet_name, self._columns)

    def record_to_row(self, record: RecordT) -> list[str]:
        return [to_cell(getattr(record, column)) for column in self._columns]

    def row_to_record(self, row: list[str]) -> RecordT:
        padded = list(row) + [""] * (len(self._columns) - len(row))
        data = dict(zip(self._columns, padded))
        for column in self._date_columns:
            data[column] = data[column].strip()[:10]
        return self._record_type.model_validate(data)

    def _find_row(self, rows: list[list[str]], record_id: str) -> tuple[int, list[str]]:
        """1-based sheet row number and contents of the record (row 1 is the header)."""
        for row_number, row in enumerate(rows[1:], start=2):
            if row and row[0] == record_id:
                return row_number, row
        raise NotFoundError(f"{self._sheet_name}: record not found: {record_id}")

    async def list(self) -> dict[str, RecordT]:
        try:
            rows = self._sheet().get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to read {self._sheet_name}: {e}") from e

        records: dict[str, RecordT] = {}
        for row_number, row in enumerate(rows[1:], start=2):
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                record = self.row_to_record(row)
            except (ValidationError, ValueError) as e:
                logger.warning(
                    "skipping_malformed_row",
                    sheet=self._sheet_name,
                    row_number=row_number,
                    error=str(e),
                )
                continue
            records[record.id] = record
        return records

    async def get(self, record_id: str) -> RecordT:
        try:
            rows = self._sheet().get_all_values()
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to read {self._sheet_name}: {e}") from e

        _, row = self._find_row(rows, record_id)
        try:
            return self.row_to_record(row)
        except (ValidationError, ValueError) as e:
            raise StorageError(f"{self._sheet_name}: record {record_id} is malformed: {e}")

    async def create(self, draft: Any) -> str:
        record = self._record_type(id=uuid4().hex, **draft.model_dump())
        try:
            self._sheet().append_row(self.record_to_row(record), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to append to {self._sheet_name}: {e}") from e
        return record.id

    async def delete(self, record_id: str) -> None:
        try:
            sheet = self._sheet()
            row_number, _ = self._find_row(sheet.get_all_values(), record_id)
            sheet.delete_rows(row_number)
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to delete from {self._sheet_name}: {e}") from e

    async def update(self, record_id: str, fields: dict[str, Any]) -> RecordT:
        try:
            sheet = self._sheet()
            row_number, row = self._find_row(sheet.get_all_values(), record_id)
        except StorageError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to read {self._sheet_name}: {e}") from e

        try:
            current = self.row_to_record(row)
        except (ValidationError, ValueError) as e:
            raise StorageError(f"{self._sheet_name}: record {record_id} is malformed: {e}")
        updated = merge_fields(current, fields)

        try:
            sheet.update(range_name=f"A{row_number}", values=[self.record_to_row(updated)])
        except Exception as e:
            raise StoreUnavailableError(f"Failed to update {self._sheet_name}: {e}") from e
        return updated


class GoogleSheetsEntryStore(EntryStoreInterface):
    """Cash book entries in the `cash-book` worksheet."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        client = client or GoogleSheetsClient()
        self._collection = SheetCollection(
            client,
            client.settings.entries_sheet_name,
            Entry,
            ENTRY_COLUMNS,
            date_columns=("date",),
        )

    async def list_entries(self) -> dict[str, Entry]:
        return await self._collection.list()

    async def create_entry(self, draft: EntryDraft) -> str:
        return await self._collection.create(draft)

    async def delete_entry(self, entry_id: str) -> None:
        await self._collection.delete(entry_id)

    async def update_entry_fields(self, entry_id: str, fields: dict[str, Any]) -> Entry:
        return await self._collection.update(entry_id, fields)


class GoogleSheetsBookingStore(BookingStoreInterface):
    """Reservations in the `bookings` worksheet."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        client = client or GoogleSheetsClient()
        self._collection = SheetCollection(
            client,
            client.settings.bookings_sheet_name,
            Booking,
            BOOKING_COLUMNS,
            date_columns=("start_date", "end_date"),
        )

    async def list_bookings(self) -> dict[str, Booking]:
        return await self._collection.list()

    async def create_booking(self, draft: BookingDraft) -> str:
        return await self._collection.create(draft)

    async def delete_booking(self, booking_id: str) -> None:
        await self._collection.delete(booking_id)

    async def update_booking_fields(self, booking_id: str, fields: dict[str, Any]) -> Booking:
        return await self._collection.update(booking_id, fields)


class GoogleSheetsUpcomingExpenseStore(UpcomingExpenseStoreInterface):
    """Planned expenses in the `upcoming-expenses` worksheet."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        client = client or GoogleSheetsClient()
        self._collection = SheetCollection(
            client,
            client.settings.upcoming_expenses_sheet_name,
            UpcomingExpense,
            UPCOMING_EXPENSE_COLUMNS,
            date_columns=("date",),
        )

    async def list_upcoming_expenses(self) -> dict[str, UpcomingExpense]:
        return await self._collection.list()

    async def get_upcoming_expense(self, expense_id: str) -> UpcomingExpense:
        return await self._collection.get(expense_id)

    async def create_upcoming_expense(self, draft: UpcomingExpenseDraft) -> str:
        return await self._collection.create(draft)

    async def delete_upcoming_expense(self, expense_id: str) -> None:
        await self._collection.delete(expense_id)

    async def update_upcoming_expense_fields(
        self,
        expense_id: str,
        fields: dict[str, Any],
    ) -> UpcomingExpense:
        return await self._collection.update(expense_id, fields)
