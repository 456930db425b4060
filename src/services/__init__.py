"""Services package."""

from src.services.storage import (
    BookingStoreInterface,
    EntryStoreInterface,
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
    UpcomingExpenseStoreInterface,
)

__all__ = [
    "BookingStoreInterface",
    "EntryStoreInterface",
    "GoogleSheetsBookingStore",
    "GoogleSheetsClient",
    "GoogleSheetsEntryStore",
    "GoogleSheetsUpcomingExpenseStore",
    "InMemoryBookingStore",
    "InMemoryEntryStore",
    "InMemoryUpcomingExpenseStore",
    "NotFoundError",
    "StorageError",
    "StoreConfigurationError",
    "StoreUnavailableError",
    "UpcomingExpenseStoreInterface",
]
