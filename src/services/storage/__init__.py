"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the hosted backend; the in-memory stores back the tests
and local runs without credentials.
"""

from src.services.storage.interface import (
    BookingStoreInterface,
    EntryStoreInterface,
    NotFoundError,
    StorageError,
    StoreConfigurationError,
    StoreUnavailableError,
    UpcomingExpenseStoreInterface,
    merge_fields,
)
from src.services.storage.google_sheets import (
    GoogleSheetsBookingStore,
    GoogleSheetsClient,
    GoogleSheetsEntryStore,
    GoogleSheetsUpcomingExpenseStore,
)
from src.services.storage.memory import (
    InMemoryBookingStore,
    InMemoryEntryStore,
    InMemoryUpcomingExpenseStore,
)

__all__ = [
    # Interfaces
    "BookingStoreInterface",
    "EntryStoreInterface",
    "UpcomingExpenseStoreInterface",
    "merge_fields",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StoreConfigurationError",
    "StoreUnavailableError",
    # Google Sheets implementation
    "GoogleSheetsBookingStore",
    "GoogleSheetsClient",
    "GoogleSheetsEntryStore",
    "GoogleSheetsUpcomingExpenseStore",
    # In-memory implementation
    "InMemoryBookingStore",
    "InMemoryEntryStore",
    "InMemoryUpcomingExpenseStore",
]
