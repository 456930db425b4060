"""
Tests for the storage backends.

The same contract runs against the in-memory stores and the Google
Sheets stores; the latter talk to a fake worksheet, never the network.
"""

import pytest
from datetime import date
from decimal import Decimal

from tenacity import wait_none

from src.config import GoogleSheetsSettings
from src.models.ledger import (
    BookingDraft,
    BookingSource,
    Entry,
    EntryDraft,
    EntryType,
    UpcomingExpenseDraft,
    UpcomingExpenseType,
)
from src.services.storage import (
    GoogleSheetsBookingStore,
    GoogleSheetsClient,
    GoogleSheetsEntryStore,
    GoogleSheetsUpcomingExpenseStore,
    InMemoryBookingStore,
    InMemoryEntryStore,
    InMemoryUpcomingExpenseStore,
    NotFoundError,
    StorageError,
    StoreConfigurationError,
    StoreUnavailableError,
    merge_fields,
)
from src.services.storage import google_sheets
from src.services.storage.google_sheets import ENTRY_COLUMNS


class FakeWorksheet:
    """Just enough of gspread.Worksheet for the stores."""

    def __init__(self, header):
        self.rows = [list(header)]
        self.fail_with = None

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def get_all_values(self):
        self._check()
        return [list(row) for row in self.rows]

    def append_row(self, row, value_input_option=None):
        self._check()
        self.rows.append(list(row))

    def delete_rows(self, index):
        self._check()
        del self.rows[index - 1]

    def update(self, range_name=None, values=None):
        self._check()
        row_number = int(range_name.lstrip("A"))
        self.rows[row_number - 1] = list(values[0])


class FakeSheetsClient:
    """Stands in for GoogleSheetsClient; one FakeWorksheet per title."""

    def __init__(self):
        self.settings = GoogleSheetsSettings.model_construct(
            credentials_path="unused.json",
            spreadsheet_id="unused",
        )
        self.worksheets = {}

    def get_worksheet(self, title, columns):
        if title not in self.worksheets:
            self.worksheets[title] = FakeWorksheet(columns)
        return self.worksheets[title]


def entry_draft(amount="50", description="ЕВН ток"):
    return EntryDraft(
        date=date(2025, 1, 10),
        type=EntryType.EXPENSE,
        amount=Decimal(amount),
        description=description,
    )


@pytest.fixture
def sheets_client():
    return FakeSheetsClient()


@pytest.fixture(params=["memory", "sheets"])
def entry_store(request, sheets_client):
    if request.param == "memory":
        return InMemoryEntryStore()
    return GoogleSheetsEntryStore(sheets_client)


@pytest.fixture(params=["memory", "sheets"])
def booking_store(request, sheets_client):
    if request.param == "memory":
        return InMemoryBookingStore()
    return GoogleSheetsBookingStore(sheets_client)


@pytest.fixture(params=["memory", "sheets"])
def upcoming_store(request, sheets_client):
    if request.param == "memory":
        return InMemoryUpcomingExpenseStore()
    return GoogleSheetsUpcomingExpenseStore(sheets_client)


@pytest.mark.asyncio
class TestEntryStoreContract:
    """Behaviour shared by every entry store."""

    async def test_create_then_list(self, entry_store):
        entry_id = await entry_store.create_entry(entry_draft())
        entries = await entry_store.list_entries()
        assert list(entries) == [entry_id]
        entry = entries[entry_id]
        assert entry.id == entry_id
        assert entry.amount == Decimal("50")
        assert entry.date == date(2025, 1, 10)
        assert entry.type == EntryType.EXPENSE

    async def test_ids_are_unique(self, entry_store):
        first = await entry_store.create_entry(entry_draft())
        second = await entry_store.create_entry(entry_draft())
        assert first != second
        assert len(await entry_store.list_entries()) == 2

    async def test_delete(self, entry_store):
        keep = await entry_store.create_entry(entry_draft(description="Кафе"))
        gone = await entry_store.create_entry(entry_draft())
        await entry_store.delete_entry(gone)
        assert list(await entry_store.list_entries()) == [keep]

    async def test_delete_missing_raises_every_time(self, entry_store):
        entry_id = await entry_store.create_entry(entry_draft())
        await entry_store.delete_entry(entry_id)
        with pytest.raises(NotFoundError):
            await entry_store.delete_entry(entry_id)
        with pytest.raises(NotFoundError):
            await entry_store.delete_entry(entry_id)

    async def test_partial_update(self, entry_store):
        entry_id = await entry_store.create_entry(entry_draft())
        updated = await entry_store.update_entry_fields(entry_id, {"amount": Decimal("75")})
        assert updated.amount == Decimal("75")
        assert updated.description == "ЕВН ток"
        stored = (await entry_store.list_entries())[entry_id]
        assert stored.amount == Decimal("75")

    async def test_update_rejects_unknown_and_id_fields(self, entry_store):
        entry_id = await entry_store.create_entry(entry_draft())
        with pytest.raises(StorageError):
            await entry_store.update_entry_fields(entry_id, {"colour": "red"})
        with pytest.raises(StorageError):
            await entry_store.update_entry_fields(entry_id, {"id": "other"})

    async def test_update_rejects_invalid_value(self, entry_store):
        entry_id = await entry_store.create_entry(entry_draft())
        with pytest.raises(StorageError):
            await entry_store.update_entry_fields(entry_id, {"amount": Decimal("-1")})

    async def test_update_missing_raises(self, entry_store):
        with pytest.raises(NotFoundError):
            await entry_store.update_entry_fields("missing", {"amount": Decimal("1")})


@pytest.mark.asyncio
class TestBookingStoreContract:
    """Behaviour shared by every booking store."""

    async def test_toggle_completed(self, booking_store):
        booking_id = await booking_store.create_booking(BookingDraft(
            source=BookingSource.DIRECT,
            description="Гост",
            start_date=date(2025, 7, 1),
            end_date=date(2025, 7, 4),
        ))
        updated = await booking_store.update_booking_fields(booking_id, {"completed": True})
        assert updated.completed is True
        stored = (await booking_store.list_bookings())[booking_id]
        assert stored.completed is True
        assert stored.end_date == date(2025, 7, 4)

    async def test_delete_missing_booking_twice(self, booking_store):
        with pytest.raises(NotFoundError):
            await booking_store.delete_booking("does-not-exist")
        with pytest.raises(NotFoundError):
            await booking_store.delete_booking("does-not-exist")


@pytest.mark.asyncio
class TestUpcomingExpenseStoreContract:
    """Behaviour shared by every upcoming expense store."""

    async def test_get_and_full_update(self, upcoming_store):
        expense_id = await upcoming_store.create_upcoming_expense(UpcomingExpenseDraft(
            date=date(2026, 2, 1),
            description="Застраховка",
            amount=Decimal("120.50"),
            type=UpcomingExpenseType.OTHERS,
        ))
        expense = await upcoming_store.get_upcoming_expense(expense_id)
        assert expense.amount == Decimal("120.50")

        updated = await upcoming_store.update_upcoming_expense_fields(expense_id, {
            "date": date(2026, 3, 1),
            "description": "Застраховка имот",
            "amount": Decimal("130"),
            "type": UpcomingExpenseType.YANA,
        })
        assert updated.type == UpcomingExpenseType.YANA
        assert (await upcoming_store.get_upcoming_expense(expense_id)).date == date(2026, 3, 1)

    async def test_get_missing_raises(self, upcoming_store):
        with pytest.raises(NotFoundError):
            await upcoming_store.get_upcoming_expense("missing")


@pytest.mark.asyncio
class TestGoogleSheetsRows:
    """Row layout and read behaviour specific to the Sheets backend."""

    async def test_row_layout(self, sheets_client):
        store = GoogleSheetsEntryStore(sheets_client)
        entry_id = await store.create_entry(entry_draft("12.5"))
        sheet = sheets_client.worksheets["cash-book"]
        assert sheet.rows[0] == ENTRY_COLUMNS
        assert sheet.rows[1] == [entry_id, "2025-01-10", "разход", "12.5", "ЕВН ток"]

    async def test_reads_iso_timestamps_as_dates(self, sheets_client):
        store = GoogleSheetsEntryStore(sheets_client)
        sheet = sheets_client.get_worksheet("cash-book", ENTRY_COLUMNS)
        sheet.rows.append(["legacy", "2024-11-03T00:00:00.000Z", "приход", "300", "Наем"])
        entries = await store.list_entries()
        assert entries["legacy"].date == date(2024, 11, 3)
        assert entries["legacy"].type == EntryType.INCOME

    async def test_malformed_rows_are_skipped(self, sheets_client):
        store = GoogleSheetsEntryStore(sheets_client)
        sheet = sheets_client.get_worksheet("cash-book", ENTRY_COLUMNS)
        sheet.rows.append(["bad", "not-a-date", "разход", "5", "x"])
        sheet.rows.append(["", "", "", "", ""])
        sheet.rows.append(["ok", "2025-01-01", "разход", "5", "x"])
        entries = await store.list_entries()
        assert list(entries) == ["ok"]

    async def test_booking_completed_round_trip(self, sheets_client):
        store = GoogleSheetsBookingStore(sheets_client)
        booking_id = await store.create_booking(BookingDraft(
            source=BookingSource.BOOKING,
            description="Гост",
            start_date=date(2025, 7, 1),
            end_date=date(2025, 7, 2),
        ))
        assert sheets_client.worksheets["bookings"].rows[1][-1] == "false"
        await store.update_booking_fields(booking_id, {"completed": True})
        assert sheets_client.worksheets["bookings"].rows[1][-1] == "true"

    async def test_transport_failure_is_store_unavailable(self, sheets_client):
        store = GoogleSheetsEntryStore(sheets_client)
        sheet = sheets_client.get_worksheet("cash-book", ENTRY_COLUMNS)
        sheet.fail_with = RuntimeError("connection reset")
        with pytest.raises(StoreUnavailableError) as excinfo:
            await store.list_entries()
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        with pytest.raises(StoreUnavailableError):
            await store.create_entry(entry_draft())
        with pytest.raises(StoreUnavailableError):
            await store.delete_entry("any")


class TestGoogleSheetsClient:
    """Tests for the connection wrapper."""

    @pytest.fixture
    def settings(self, tmp_path):
        return GoogleSheetsSettings.model_construct(
            credentials_path=str(tmp_path / "service-account.json"),
            spreadsheet_id="sheet",
            request_timeout_seconds=15,
        )

    def test_missing_credentials_file(self, settings, monkeypatch):
        monkeypatch.setattr(GoogleSheetsClient.connect.retry, "wait", wait_none())
        client = GoogleSheetsClient(settings)
        with pytest.raises(StoreUnavailableError):
            client.connect()

    def test_missing_credentials_file_is_not_retried(self, settings, monkeypatch):
        monkeypatch.setattr(GoogleSheetsClient.connect.retry, "wait", wait_none())
        attempts = []

        class MissingCredentials:
            @staticmethod
            def from_service_account_file(path, scopes):
                attempts.append(path)
                raise FileNotFoundError(path)

        monkeypatch.setattr(google_sheets, "Credentials", MissingCredentials)
        client = GoogleSheetsClient(settings)
        with pytest.raises(StoreConfigurationError):
            client.connect()
        assert len(attempts) == 1

    def test_transient_failure_is_retried(self, settings, monkeypatch):
        monkeypatch.setattr(GoogleSheetsClient.connect.retry, "wait", wait_none())
        attempts = []

        class FlakyCredentials:
            @staticmethod
            def from_service_account_file(path, scopes):
                attempts.append(path)
                if len(attempts) < 3:
                    raise RuntimeError("token endpoint timed out")
                return "credentials"

        class FakeClient:
            timeout = None

            def set_timeout(self, timeout):
                self.timeout = timeout

        monkeypatch.setattr(google_sheets, "Credentials", FlakyCredentials)
        monkeypatch.setattr(google_sheets.gspread, "authorize", lambda credentials: FakeClient())

        client = GoogleSheetsClient(settings).connect()

        assert len(attempts) == 3
        assert client.timeout == 15


class TestMergeFields:
    """Tests for the shared partial-update helper."""

    def test_only_named_fields_change(self):
        entry = Entry(
            id="e1",
            date=date(2025, 1, 1),
            type=EntryType.INCOME,
            amount=Decimal("1"),
            description="a",
        )
        merged = merge_fields(entry, {"description": "b"})
        assert merged.description == "b"
        assert merged.amount == Decimal("1")
        assert entry.description == "a"
