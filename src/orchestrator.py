"""
Main Orchestrator for the Cash Book

This module ties together all the components and defines the
end-to-end flows for:
1. Cash book (form → validate → store → audit; reports and charts)
2. Bookings (reservations, completion flag, dashboard split, paging)
3. Upcoming expenses (planned expenses, copy into the cash book)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing form validation
- Report ranges are checked before the store is read
- Every change is audited, and every store failure is audited and
  re-raised unchanged (no retries)

The ledger core stays pure; only this module touches the stores.
"""

from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Iterator, Optional, Union
from uuid import UUID

import structlog

from src.audit import AuditLogger, create_correlation_id
from src.auth import Authenticator
from src.config import AppSettings, get_settings
from src.ledger import (
    balance_by_period,
    cumulative_series,
    entries_for_year,
    expenses_by_description,
    first_upcoming_page,
    group_by_period,
    order_bookings,
    order_entries,
    paginate,
    summarize_bookings,
    top_categories,
    total_pages,
    totals_by_currency,
)
from src.models.ledger import (
    Booking,
    BookingsSummary,
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
    UpcomingExpensesSummary,
    UpcomingExpenseType,
    ValidationResult,
    YearlySummary,
)
from src.queries import (
    available_years,
    monthly_report,
    parse_period,
    parse_year,
    yearly_summary,
)
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
    UpcomingExpenseStoreInterface,
)
from src.validation import FormValidationError, FormValidator

logger = structlog.get_logger(__name__)


class _AuditedFlow:
    """Shared audit plumbing for the flows."""

    entity_type = ""

    def __init__(
        self,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._settings = settings or get_settings().app
        self._validator = validator or FormValidator(self._settings.max_entry_amount)
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @contextmanager
    def _store_call(
        self,
        operation: str,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Iterator[None]:
        """Audit a failed store call, then let the error propagate."""
        try:
            yield
        except StorageError as e:
            self._audit_logger.log_store_error(
                operation=operation,
                error_message=str(e),
                entity_type=self.entity_type,
                entity_id=entity_id,
                correlation_id=correlation_id,
            )
            raise

    def _rejected(self, error: FormValidationError, correlation_id: Optional[UUID]) -> None:
        self._audit_logger.log_validation_failed(
            form=error.result.form,
            issues=[issue.model_dump() for issue in error.result.issues],
            correlation_id=correlation_id,
        )


class CashBookFlow(_AuditedFlow):
    """
    Orchestrates the cash book: entries, reports and chart data.

    Every read fetches a fresh snapshot; there is no cache to go stale
    after a write.
    """

    entity_type = "entry"

    def __init__(
        self,
        entry_store: EntryStoreInterface,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        super().__init__(validator, audit_logger, settings)
        self._entries = entry_store

    async def _snapshot(self) -> dict[str, Entry]:
        with self._store_call("list_entries"):
            return await self._entries.list_entries()

    async def list_entries(self) -> list[Entry]:
        """All entries by date (oldest first)."""
        return order_entries(await self._snapshot())

    async def add_entry(
        self,
        type: Any,
        amount: Any,
        description: Any,
        entry_date: Any,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[str, ValidationResult]:
        """
        Validate a cash book form and store it.

        Returns:
            (entry_id, validation_result). The result may carry warnings.

        Raises:
            FormValidationError: The form had errors; nothing was stored
            StorageError: The store rejected or failed the write
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            draft, result = self._validator.build_entry_draft(
                type, amount, description, entry_date
            )
        except FormValidationError as e:
            self._rejected(e, correlation_id)
            raise

        with self._store_call("create_entry", correlation_id=correlation_id):
            entry_id = await self._entries.create_entry(draft)

        self._audit_logger.log_record_created(
            entity_type=self.entity_type,
            entity_id=entry_id,
            details=draft.model_dump(mode="json"),
            correlation_id=correlation_id,
        )
        return entry_id, result

    async def delete_entry(self, entry_id: str) -> None:
        """
        Raises:
            NotFoundError: If the entry is already gone
        """
        with self._store_call("delete_entry", entity_id=entry_id):
            await self._entries.delete_entry(entry_id)
        self._audit_logger.log_record_deleted(self.entity_type, entry_id)

    async def monthly_report(
        self,
        month: Union[str, int, None],
        year: Union[str, int, None],
    ) -> MonthlyReport:
        """
        Report for one calendar month.

        The range is parsed before the store is read.

        Raises:
            InvalidRangeError: Month outside 1..12 or values not numbers
        """
        parsed_month, parsed_year = parse_period(month, year)
        snapshot = await self._snapshot()
        report = monthly_report(snapshot, parsed_month, parsed_year)

        self._audit_logger.log_report_generated(
            report_type="monthly",
            parameters={"month": parsed_month, "year": parsed_year},
            entry_count=len(report.entries),
        )
        return report

    async def yearly_summary(self, year: Union[str, int, None]) -> YearlySummary:
        parsed_year = parse_year(year)
        return yearly_summary(await self._snapshot(), parsed_year)

    async def top_categories(
        self,
        year: Union[str, int, None] = None,
        n: Optional[int] = None,
    ) -> list[CategoryTotal]:
        """Largest expense categories, `top_categories_limit` by default."""
        parsed_year = None if year is None else parse_year(year)
        limit = self._settings.top_categories_limit if n is None else n
        return top_categories(await self._snapshot(), limit, year=parsed_year)

    async def available_years(self) -> list[int]:
        return available_years(await self._snapshot())

    async def _entries_in(self, year: Union[str, int, None]) -> list[Entry]:
        """
        Entries of one calendar year, by (date, id).

        Chart series stay within one year so every amount in a series
        shares the currency unit of that year.
        """
        parsed_year = parse_year(year)
        return order_entries(entries_for_year(await self._snapshot(), parsed_year))

    async def balance_by_month(self, year: Union[str, int, None]) -> dict[str, Decimal]:
        return balance_by_period(await self._entries_in(year), Granularity.MONTH)

    async def cumulative_series(
        self,
        year: Union[str, int, None],
        granularity: Granularity = Granularity.DAY,
    ) -> CumulativeSeries:
        return cumulative_series(await self._entries_in(year), granularity)

    async def daily_totals(self, year: Union[str, int, None]) -> dict[str, PeriodTotals]:
        """Income and expense per day, not accumulated."""
        return group_by_period(await self._entries_in(year), Granularity.DAY)

    async def expense_distribution(self, year: Union[str, int, None]) -> dict[str, Decimal]:
        """Expenses summed per description (pie chart data)."""
        return expenses_by_description(await self._entries_in(year))


class BookingsFlow(_AuditedFlow):
    """Orchestrates reservations and their dashboard views."""

    entity_type = "booking"

    def __init__(
        self,
        booking_store: BookingStoreInterface,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        super().__init__(validator, audit_logger, settings)
        self._bookings = booking_store

    async def list_bookings(self) -> list[Booking]:
        """All bookings by start date."""
        with self._store_call("list_bookings"):
            snapshot = await self._bookings.list_bookings()
        return order_bookings(snapshot)

    async def add_booking(
        self,
        source: Any,
        description: Any,
        start_date: Any,
        end_date: Any,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[str, ValidationResult]:
        """
        Raises:
            FormValidationError: The form had errors; nothing was stored
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            draft, result = self._validator.build_booking_draft(
                source, description, start_date, end_date
            )
        except FormValidationError as e:
            self._rejected(e, correlation_id)
            raise

        with self._store_call("create_booking", correlation_id=correlation_id):
            booking_id = await self._bookings.create_booking(draft)

        self._audit_logger.log_record_created(
            entity_type=self.entity_type,
            entity_id=booking_id,
            details=draft.model_dump(mode="json"),
            correlation_id=correlation_id,
        )
        return booking_id, result

    async def set_completed(self, booking_id: str, completed: bool) -> Booking:
        fields = {"completed": completed}
        with self._store_call("update_booking_fields", entity_id=booking_id):
            booking = await self._bookings.update_booking_fields(booking_id, fields)
        self._audit_logger.log_record_updated(self.entity_type, booking_id, fields)
        return booking

    async def toggle_completed(self, booking_id: str) -> Booking:
        """
        Flip the completion flag of a booking.

        Raises:
            NotFoundError: If no booking has this id
        """
        with self._store_call("list_bookings", entity_id=booking_id):
            snapshot = await self._bookings.list_bookings()
            if booking_id not in snapshot:
                raise NotFoundError(f"Booking not found: {booking_id}")
        return await self.set_completed(booking_id, not snapshot[booking_id].completed)

    async def delete_booking(self, booking_id: str) -> None:
        with self._store_call("delete_booking", entity_id=booking_id):
            await self._bookings.delete_booking(booking_id)
        self._audit_logger.log_record_deleted(self.entity_type, booking_id)

    async def summary(self, today: Optional[date] = None) -> BookingsSummary:
        """Next open bookings, split into current stays and upcoming ones."""
        bookings = await self.list_bookings()
        return summarize_bookings(
            bookings,
            today or date.today(),
            limit=self._settings.summary_limit,
        )

    async def page(self, number: int) -> tuple[list[Booking], int]:
        """
        One page of the bookings table.

        Returns:
            (bookings_on_page, total_page_count)
        """
        bookings = await self.list_bookings()
        per_page = self._settings.items_per_page
        return paginate(bookings, number, per_page), total_pages(len(bookings), per_page)

    async def initial_page(self, today: Optional[date] = None) -> int:
        """Page the table opens on: the one holding the next booking."""
        bookings = await self.list_bookings()
        return first_upcoming_page(
            bookings,
            today or date.today(),
            self._settings.items_per_page,
        )


class UpcomingExpensesFlow(_AuditedFlow):
    """
    Orchestrates planned expenses.

    Copying a planned expense into the cash book creates a new expense
    entry and leaves the planned record in place; it can be copied again
    or deleted separately.
    """

    entity_type = "upcoming_expense"

    def __init__(
        self,
        upcoming_store: UpcomingExpenseStoreInterface,
        entry_store: EntryStoreInterface,
        validator: Optional[FormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        super().__init__(validator, audit_logger, settings)
        self._upcoming = upcoming_store
        self._entries = entry_store

    async def list_expenses(
        self,
        type_filter: Optional[UpcomingExpenseType] = None,
    ) -> list[UpcomingExpense]:
        """Planned expenses by date; all tags when `type_filter` is None."""
        with self._store_call("list_upcoming_expenses"):
            snapshot = await self._upcoming.list_upcoming_expenses()
        expenses = sorted(snapshot.values(), key=lambda e: (e.date, e.id))
        if type_filter is not None:
            expenses = [e for e in expenses if e.type == type_filter]
        return expenses

    async def add_expense(
        self,
        expense_date: Any,
        description: Any,
        amount: Any,
        type: Any,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[str, ValidationResult]:
        correlation_id = correlation_id or create_correlation_id()
        try:
            draft, result = self._validator.build_upcoming_expense_draft(
                expense_date, description, amount, type
            )
        except FormValidationError as e:
            self._rejected(e, correlation_id)
            raise

        with self._store_call("create_upcoming_expense", correlation_id=correlation_id):
            expense_id = await self._upcoming.create_upcoming_expense(draft)

        self._audit_logger.log_record_created(
            entity_type=self.entity_type,
            entity_id=expense_id,
            details=draft.model_dump(mode="json"),
            correlation_id=correlation_id,
        )
        return expense_id, result

    async def update_expense(
        self,
        expense_id: str,
        expense_date: Any,
        description: Any,
        amount: Any,
        type: Any,
    ) -> UpcomingExpense:
        """
        Replace every field of a planned expense with the edited form.

        Raises:
            FormValidationError: The form had errors; nothing was stored
            NotFoundError: If no expense has this id
        """
        correlation_id = create_correlation_id()
        try:
            draft, _ = self._validator.build_upcoming_expense_draft(
                expense_date, description, amount, type
            )
        except FormValidationError as e:
            self._rejected(e, correlation_id)
            raise

        fields = draft.model_dump()
        with self._store_call(
            "update_upcoming_expense_fields",
            entity_id=expense_id,
            correlation_id=correlation_id,
        ):
            expense = await self._upcoming.update_upcoming_expense_fields(expense_id, fields)

        self._audit_logger.log_record_updated(
            self.entity_type,
            expense_id,
            draft.model_dump(mode="json"),
            correlation_id=correlation_id,
        )
        return expense

    async def delete_expense(self, expense_id: str) -> None:
        with self._store_call("delete_upcoming_expense", entity_id=expense_id):
            await self._upcoming.delete_upcoming_expense(expense_id)
        self._audit_logger.log_record_deleted(self.entity_type, expense_id)

    async def copy_to_cash_book(
        self,
        expense_id: str,
        on: Optional[date] = None,
    ) -> str:
        """
        Record a planned expense as an expense entry dated `on` (today).

        Returns:
            Id of the new cash book entry

        Raises:
            NotFoundError: If no expense has this id
        """
        correlation_id = create_correlation_id()
        with self._store_call(
            "get_upcoming_expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
        ):
            expense = await self._upcoming.get_upcoming_expense(expense_id)

        draft = EntryDraft(
            date=on or date.today(),
            type=EntryType.EXPENSE,
            amount=expense.amount,
            description=expense.description,
        )
        with self._store_call(
            "create_entry",
            entity_id=expense_id,
            correlation_id=correlation_id,
        ):
            entry_id = await self._entries.create_entry(draft)

        self._audit_logger.log_expense_copied(
            upcoming_expense_id=expense_id,
            entry_id=entry_id,
            amount=str(expense.amount),
            correlation_id=correlation_id,
        )
        return entry_id

    async def totals(
        self,
        type_filter: Optional[UpcomingExpenseType] = None,
    ) -> dict[CurrencyUnit, Decimal]:
        """Planned amounts summed per currency unit."""
        expenses = await self.list_expenses(type_filter)
        return totals_by_currency((e.date, e.amount) for e in expenses)

    async def summary(self) -> UpcomingExpensesSummary:
        """The first planned expenses by date, with their totals."""
        expenses = (await self.list_expenses())[:self._settings.summary_limit]
        return UpcomingExpensesSummary(
            expenses=expenses,
            totals=totals_by_currency((e.date, e.amount) for e in expenses),
        )


def describe_store_error(error: StorageError) -> str:
    """User-facing message for a failed store call."""
    if isinstance(error, NotFoundError):
        return f"That record no longer exists: {error}"
    return f"The store could not be reached: {error}"


def create_app_components(
    use_storage: bool = True,
) -> tuple[CashBookFlow, BookingsFlow, UpcomingExpensesFlow, Authenticator]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to connect to Google Sheets.
                    Set to False to run on in-memory stores.

    Returns:
        (cash_book_flow, bookings_flow, upcoming_expenses_flow, authenticator)
    """
    audit_logger = AuditLogger()
    entry_store: EntryStoreInterface
    booking_store: BookingStoreInterface
    upcoming_store: UpcomingExpenseStoreInterface

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            entry_store = GoogleSheetsEntryStore(sheets_client)
            booking_store = GoogleSheetsBookingStore(sheets_client)
            upcoming_store = GoogleSheetsUpcomingExpenseStore(sheets_client)
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            use_storage = False

    if not use_storage:
        entry_store = InMemoryEntryStore()
        booking_store = InMemoryBookingStore()
        upcoming_store = InMemoryUpcomingExpenseStore()

    validator = FormValidator()

    cash_book_flow = CashBookFlow(
        entry_store,
        validator=validator,
        audit_logger=audit_logger,
    )
    bookings_flow = BookingsFlow(
        booking_store,
        validator=validator,
        audit_logger=audit_logger,
    )
    upcoming_expenses_flow = UpcomingExpensesFlow(
        upcoming_store,
        entry_store,
        validator=validator,
        audit_logger=audit_logger,
    )
    authenticator = Authenticator(audit_logger=audit_logger)

    return cash_book_flow, bookings_flow, upcoming_expenses_flow, authenticator
