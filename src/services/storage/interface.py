"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the hosted backend (Google Sheets) behind a narrow contract
2. Use in-memory storage for testing and for running without credentials
3. Keep the aggregation core free of any I/O

Every collection offers the same four operations: full snapshot read,
append with a store-generated id, delete by id and partial update by id.
Snapshots are plain dicts of id -> record; their order carries no meaning,
callers sort before display or aggregation.

There are no transactions and no optimistic concurrency checks. The last
write wins.
"""

from abc import ABC, abstractmethod
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from src.models.ledger import (
    Booking,
    BookingDraft,
    Entry,
    EntryDraft,
    UpcomingExpense,
    UpcomingExpenseDraft,
)

RecordT = TypeVar("RecordT", bound=BaseModel)


class EntryStoreInterface(ABC):
    """Cash book entries collection."""

    @abstractmethod
    async def list_entries(self) -> dict[str, Entry]:
        """
        Read the whole collection.

        Returns:
            Mapping of id -> Entry, in no particular order

        Raises:
            StoreUnavailableError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def create_entry(self, draft: EntryDraft) -> str:
        """
        Append a new entry.

        Returns:
            The id the store assigned
        """
        pass

    @abstractmethod
    async def delete_entry(self, entry_id: str) -> None:
        """
        Delete an entry by id.

        Raises:
            NotFoundError: If no entry has this id. Deleting the same id
                twice raises on the second call.
        """
        pass

    @abstractmethod
    async def update_entry_fields(self, entry_id: str, fields: dict[str, Any]) -> Entry:
        """
        Merge `fields` into an existing entry.

        Only the named fields change.

        Returns:
            The entry as stored after the update

        Raises:
            NotFoundError: If no entry has this id
            StorageError: If a field is unknown or the merged record is invalid
        """
        pass


class BookingStoreInterface(ABC):
    """Reservations collection."""

    @abstractmethod
    async def list_bookings(self) -> dict[str, Booking]:
        """Read the whole collection as id -> Booking."""
        pass

    @abstractmethod
    async def create_booking(self, draft: BookingDraft) -> str:
        """Append a reservation; returns the store-assigned id."""
        pass

    @abstractmethod
    async def delete_booking(self, booking_id: str) -> None:
        """
        Delete a reservation.

        Raises:
            NotFoundError: If no booking has this id
        """
        pass

    @abstractmethod
    async def update_booking_fields(self, booking_id: str, fields: dict[str, Any]) -> Booking:
        """
        Merge `fields` into a reservation (normally just `completed`).

        Raises:
            NotFoundError: If no booking has this id
        """
        pass


class UpcomingExpenseStoreInterface(ABC):
    """Planned expenses collection."""

    @abstractmethod
    async def list_upcoming_expenses(self) -> dict[str, UpcomingExpense]:
        """Read the whole collection as id -> UpcomingExpense."""
        pass

    @abstractmethod
    async def get_upcoming_expense(self, expense_id: str) -> UpcomingExpense:
        """
        Read a single planned expense.

        Raises:
            NotFoundError: If no expense has this id
        """
        pass

    @abstractmethod
    async def create_upcoming_expense(self, draft: UpcomingExpenseDraft) -> str:
        """Append a planned expense; returns the store-assigned id."""
        pass

    @abstractmethod
    async def delete_upcoming_expense(self, expense_id: str) -> None:
        """
        Delete a planned expense.

        Raises:
            NotFoundError: If no expense has this id
        """
        pass

    @abstractmethod
    async def update_upcoming_expense_fields(
        self,
        expense_id: str,
        fields: dict[str, Any],
    ) -> UpcomingExpense:
        """
        Merge `fields` into a planned expense.

        Raises:
            NotFoundError: If no expense has this id
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StoreUnavailableError(StorageError):
    """The storage backend failed at the transport level."""
    pass


class StoreConfigurationError(StoreUnavailableError):
    """The backend cannot be reached as configured (e.g. no credentials file)."""
    pass


def merge_fields(record: RecordT, fields: dict[str, Any]) -> RecordT:
    """
    Apply a partial update to a record and re-validate the result.

    Raises:
        StorageError: If a field is unknown, is the id, or the merged
            record fails validation
    """
    rejected = sorted(
        name for name in fields
        if name == "id" or name not in type(record).model_fields
    )
    if rejected:
        raise StorageError(f"Cannot update fields: {rejected}")
    try:
        return type(record).model_validate({**record.model_dump(), **fields})
    except ValidationError as e:
        raise StorageError(f"Invalid update: {e}")
