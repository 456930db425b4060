"""
Tests for the Cash Book

Test strategy:
1. Unit tests for individual components (models, ledger core, validators)
2. Integration tests for flows (against the in-memory stores)
3. No real API calls in tests (the Sheets backend runs on a fake worksheet)
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from src.models.ledger import (
    Booking,
    BookingDraft,
    BookingSource,
    CurrencyUnit,
    Entry,
    EntryDraft,
    EntryType,
    MonthlyReport,
    PeriodTotals,
    UpcomingExpenseDraft,
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


class TestLedgerModels:
    """Tests for the stored record models."""

    def test_entry_creation(self):
        """Test Entry model creation."""
        entry = Entry(
            id="e1",
            date=date(2025, 1, 10),
            type=EntryType.EXPENSE,
            amount=Decimal("50"),
            description="ЕВН ток",
        )
        assert entry.type == EntryType.EXPENSE
        assert entry.amount == Decimal("50")

    def test_entry_type_keeps_stored_values(self):
        """Entry types read back the Bulgarian values already in the store."""
        assert EntryType("приход") == EntryType.INCOME
        assert EntryType("разход") == EntryType.EXPENSE

    def test_entry_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        draft = EntryDraft(
            date=date(2025, 1, 1),
            type=EntryType.INCOME,
            amount=Decimal("10"),
            description="  Наем  ",
        )
        assert draft.description == "Наем"

    def test_entry_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in (Decimal("0"), Decimal("-5")):
            with pytest.raises(ValueError):
                EntryDraft(
                    date=date(2025, 1, 1),
                    type=EntryType.EXPENSE,
                    amount=amount,
                    description="Test",
                )

    def test_entry_rejects_empty_description(self):
        with pytest.raises(ValueError):
            EntryDraft(
                date=date(2025, 1, 1),
                type=EntryType.EXPENSE,
                amount=Decimal("1"),
                description="   ",
            )

    def test_booking_date_validation(self):
        """Test that end date cannot precede start date."""
        with pytest.raises(ValueError):
            BookingDraft(
                source=BookingSource.AIRBNB,
                description="Guest",
                start_date=date(2025, 3, 10),
                end_date=date(2025, 3, 9),
            )

    def test_booking_defaults_to_not_completed(self):
        booking = Booking(
            id="b1",
            source=BookingSource.BOOKING,
            description="Guest",
            start_date=date(2025, 3, 10),
            end_date=date(2025, 3, 13),
        )
        assert booking.completed is False
        assert booking.nights == 3

    def test_upcoming_expense_type_values(self):
        """Test the two planned expense tags."""
        draft = UpcomingExpenseDraft(
            date=date(2025, 5, 1),
            description="Застраховка",
            amount=Decimal("120"),
            type="Яна",
        )
        assert draft.type == UpcomingExpenseType.YANA
        assert {t.value for t in UpcomingExpenseType} == {"Яна", "Others"}


class TestDerivedModels:
    """Tests for the report models."""

    def test_monthly_report_balance(self):
        """Balance is always income minus expense."""
        report = MonthlyReport(
            month=1,
            year=2025,
            total_income=Decimal("200"),
            total_expense=Decimal("50"),
        )
        assert report.balance == Decimal("150")
        assert report.currency == CurrencyUnit.BGN

    def test_monthly_report_currency_after_cutover(self):
        report = MonthlyReport(month=2, year=2026)
        assert report.currency == CurrencyUnit.EUR
        assert report.balance == Decimal("0")

    def test_monthly_report_month_bounds(self):
        with pytest.raises(ValueError):
            MonthlyReport(month=13, year=2025)

    def test_yearly_summary_profit(self):
        summary = YearlySummary(
            year=2025,
            total_income=Decimal("1000"),
            total_expense=Decimal("1200"),
        )
        assert summary.profit == Decimal("-200")

    def test_period_totals_balance(self):
        totals = PeriodTotals(income=Decimal("5"), expense=Decimal("2"))
        assert totals.balance == Decimal("3")


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            description="Created entry",
        )
        assert event.event_type == AuditEventType.RECORD_CREATED
        assert event.severity == AuditSeverity.INFO
        assert isinstance(event.timestamp, datetime)

    def test_event_types_are_the_ones_emitted(self):
        """Every event type has a builder; there is no catch-all error type."""
        assert {t.value for t in AuditEventType} == {
            "record_created",
            "record_updated",
            "record_deleted",
            "expense_copied_to_cash_book",
            "report_generated",
            "validation_failed",
            "login_succeeded",
            "login_failed",
            "store_error",
        }

    def test_audit_event_to_log_dict(self):
        """Test AuditEvent conversion to log dict."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type="booking",
            entity_id="abc",
            description="Deleted booking abc",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "record_deleted"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["correlation_id"] is None

    def test_audit_event_builder_expense_copied(self):
        """Test AuditEventBuilder for a copied expense."""
        event = AuditEventBuilder.expense_copied(
            upcoming_expense_id="u1",
            entry_id="e1",
            amount="120",
        )
        assert event.event_type == AuditEventType.EXPENSE_COPIED_TO_CASH_BOOK
        assert event.entity_id == "e1"
        assert event.details["upcoming_expense_id"] == "u1"
        assert event.is_user_action is True

    def test_audit_event_builder_store_error(self):
        event = AuditEventBuilder.store_error(
            operation="delete_booking",
            error_message="Booking not found: x",
            entity_type="booking",
            entity_id="x",
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "Booking not found: x"

    def test_audit_event_builder_login_failed_is_warning(self):
        event = AuditEventBuilder.login_failed("admin")
        assert event.event_type == AuditEventType.LOGIN_FAILED
        assert event.severity == AuditSeverity.WARNING


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            form="entry",
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount is required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.is_valid is False
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test result with only warnings."""
        result = ValidationResult(
            form="entry",
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="suspicious_value",
                    message="Amount seems unusually high",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.is_valid is True
        assert result.warnings == ["Amount seems unusually high"]

    def test_validation_issue_severity_pattern(self):
        with pytest.raises(ValueError):
            ValidationIssue(
                field="amount",
                issue_type="missing",
                message="x",
                severity="fatal",
            )
