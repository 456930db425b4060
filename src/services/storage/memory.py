"""
In-Memory Storage Implementation

Dict-backed collections with the same contract as the hosted backend.
Used by the tests and as the fallback when no spreadsheet is configured;
nothing survives a restart.
"""

from typing import Any, Generic
from uuid import uuid4

from pydantic import BaseModel

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
    UpcomingExpenseStoreInterface,
    merge_fields,
)


class _InMemoryCollection(Generic[RecordT]):
    """Shared id -> record dict with the four collection operations."""

    def __init__(self, record_type: type[RecordT], name: str):
        self._record_type = record_type
        self._name = name
        self._records: dict[str, RecordT] = {}

    def snapshot(self) -> dict[str, RecordT]:
        return dict(self._records)

    def get(self, record_id: str) -> RecordT:
        try:
            return self._records[record_id]
        except KeyError:
            raise NotFoundError(f"{self._name} not found: {record_id}")

    def create(self, draft: BaseModel) -> str:
        record_id = uuid4().hex
        self._records[record_id] = self._record_type(id=record_id, **draft.model_dump())
        return record_id

    def delete(self, record_id: str) -> None:
        if record_id not in self._records:
            raise NotFoundError(f"{self._name} not found: {record_id}")
        del self._records[record_id]

    def update(self, record_id: str, fields: dict[str, Any]) -> RecordT:
        updated = merge_fields(self.get(record_id), fields)
        self._records[record_id] = updated
        return updated


class InMemoryEntryStore(EntryStoreInterface):

    def __init__(self):
        self._collection = _InMemoryCollection(Entry, "Entry")

    async def list_entries(self) -> dict[str, Entry]:
        return self._collection.snapshot()

    async def create_entry(self, draft: EntryDraft) -> str:
        return self._collection.create(draft)

    async def delete_entry(self, entry_id: str) -> None:
        self._collection.delete(entry_id)

    async def update_entry_fields(self, entry_id: str, fields: dict[str, Any]) -> Entry:
        return self._collection.update(entry_id, fields)


class InMemoryBookingStore(BookingStoreInterface):

    def __init__(self):
        self._collection = _InMemoryCollection(Booking, "Booking")

    async def list_bookings(self) -> dict[str, Booking]:
        return self._collection.snapshot()

    async def create_booking(self, draft: BookingDraft) -> str:
        return self._collection.create(draft)

    async def delete_booking(self, booking_id: str) -> None:
        self._collection.delete(booking_id)

    async def update_booking_fields(self, booking_id: str, fields: dict[str, Any]) -> Booking:
        return self._collection.update(booking_id, fields)


class InMemoryUpcomingExpenseStore(UpcomingExpenseStoreInterface):

    def __init__(self):
        self._collection = _InMemoryCollection(UpcomingExpense, "Upcoming expense")

    async def list_upcoming_expenses(self) -> dict[str, UpcomingExpense]:
        return self._collection.snapshot()

    async def get_upcoming_expense(self, expense_id: str) -> UpcomingExpense:
        return self._collection.get(expense_id)

    async def create_upcoming_expense(self, draft: UpcomingExpenseDraft) -> str:
        return self._collection.create(draft)

    async def delete_upcoming_expense(self, expense_id: str) -> None:
        self._collection.delete(expense_id)

    async def update_upcoming_expense_fields(
        self,
        expense_id: str,
        fields: dict[str, Any],
    ) -> UpcomingExpense:
        return self._collection.update(expense_id, fields)
