"""
Data Models Package

This package contains all Pydantic models used by the cash book.
Records read from or written to the store must conform to these schemas.
"""

from src.models.ledger import (
    Booking,
    BookingDraft,
    BookingSource,
    BookingsSummary,
    CalendarDate,
    CategoryTotal,
    CumulativeSeries,
    CurrencyUnit,
    Entry,
    EntryDraft,
    EntryType,
    Granularity,
    MonthlyReport,
    PeriodTotals,
    UpcomingExpense,
    UpcomingExpenseDraft,
    UpcomingExpensesSummary,
    UpcomingExpenseType,
    ValidationIssue,
    ValidationResult,
    YearlySummary,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Booking",
    "BookingDraft",
    "BookingSource",
    "BookingsSummary",
    "CalendarDate",
    "CategoryTotal",
    "CumulativeSeries",
    "CurrencyUnit",
    "Entry",
    "EntryDraft",
    "EntryType",
    "Granularity",
    "MonthlyReport",
    "PeriodTotals",
    "UpcomingExpense",
    "UpcomingExpenseDraft",
    "UpcomingExpensesSummary",
    "UpcomingExpenseType",
    "ValidationIssue",
    "ValidationResult",
    "YearlySummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
