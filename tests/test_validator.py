"""Tests for form validation."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from src.models.ledger import BookingSource, EntryType, UpcomingExpenseType
from src.validation import FormValidationError, FormValidator


@pytest.fixture
def validator():
    return FormValidator(max_entry_amount=10000)


def error_fields(result):
    return {issue.field for issue in result.issues if issue.severity == "error"}


class TestEntryForm:
    """Tests for the cash book form."""

    def test_valid_form(self, validator):
        result = validator.validate_entry_form("разход", "50", "ЕВН ток", "2025-01-10")
        assert result.is_valid
        assert result.issues == []

    def test_comma_decimal_separator(self, validator):
        draft, result = validator.build_entry_draft(
            EntryType.EXPENSE, "12,50", "Кафе", date(2025, 1, 1)
        )
        assert draft.amount == Decimal("12.50")
        assert result.is_valid

    def test_widget_values_accepted(self, validator):
        draft, _ = validator.build_entry_draft(
            EntryType.INCOME, 200.0, "Наем", datetime(2025, 1, 15, 9, 30)
        )
        assert draft.date == date(2025, 1, 15)
        assert draft.amount == Decimal("200.0")

    def test_missing_fields(self, validator):
        result = validator.validate_entry_form(None, "", "  ", None)
        assert error_fields(result) == {"type", "amount", "description", "date"}
        assert result.error_count == 4

    @pytest.mark.parametrize("amount", ["abc", "1.2.3", "NaN", True])
    def test_amount_must_be_numeric(self, validator, amount):
        result = validator.validate_entry_form("приход", amount, "x", "2025-01-01")
        assert error_fields(result) == {"amount"}

    @pytest.mark.parametrize("amount", ["0", "-5", -1])
    def test_amount_must_be_positive(self, validator, amount):
        result = validator.validate_entry_form("приход", amount, "x", "2025-01-01")
        assert error_fields(result) == {"amount"}

    def test_unknown_type(self, validator):
        result = validator.validate_entry_form("доход", "5", "x", "2025-01-01")
        assert error_fields(result) == {"type"}

    def test_bad_date(self, validator):
        result = validator.validate_entry_form("приход", "5", "x", "31.01.2025")
        assert error_fields(result) == {"date"}

    def test_description_too_long(self, validator):
        result = validator.validate_entry_form("приход", "5", "x" * 501, "2025-01-01")
        assert error_fields(result) == {"description"}

    def test_large_amount_is_warning_only(self, validator):
        draft, result = validator.build_entry_draft("приход", "20000", "Продажба", "2025-01-01")
        assert draft.amount == Decimal("20000")
        assert result.is_valid
        assert len(result.warnings) == 1

    def test_build_raises_with_result(self, validator):
        with pytest.raises(FormValidationError) as excinfo:
            validator.build_entry_draft("приход", "", "x", "2025-01-01")
        assert excinfo.value.result.form == "entry"
        assert "Amount is required" in str(excinfo.value)


class TestBookingForm:
    """Tests for the reservation form."""

    def test_valid_booking(self, validator):
        draft, _ = validator.build_booking_draft(
            "Airbnb", "Гост", "2025-07-01", "2025-07-04"
        )
        assert draft.source == BookingSource.AIRBNB
        assert draft.completed is False

    def test_end_before_start(self, validator):
        result = validator.validate_booking_form(
            BookingSource.DIRECT, "Гост", date(2025, 7, 4), date(2025, 7, 1)
        )
        assert error_fields(result) == {"end_date"}

    def test_same_day_is_allowed(self, validator):
        result = validator.validate_booking_form(
            BookingSource.DIRECT, "Гост", date(2025, 7, 4), date(2025, 7, 4)
        )
        assert result.is_valid

    def test_unknown_source(self, validator):
        result = validator.validate_booking_form("Expedia", "Гост", "2025-07-01", "2025-07-02")
        assert error_fields(result) == {"source"}


class TestUpcomingExpenseForm:
    """Tests for the planned expense form."""

    def test_valid(self, validator):
        draft, _ = validator.build_upcoming_expense_draft(
            "2026-01-05", "Застраховка", "99,90", "Others"
        )
        assert draft.type == UpcomingExpenseType.OTHERS
        assert draft.amount == Decimal("99.90")

    def test_missing_type(self, validator):
        with pytest.raises(FormValidationError) as excinfo:
            validator.build_upcoming_expense_draft("2026-01-05", "x", "1", None)
        assert error_fields(excinfo.value.result) == {"type"}


class TestSummary:
    """Tests for the user facing summary text."""

    def test_all_passed(self, validator):
        result = validator.validate_entry_form("приход", "5", "x", "2025-01-01")
        assert "All checks passed" in validator.get_user_friendly_summary(result)

    def test_errors_listed_with_fixes(self, validator):
        result = validator.validate_entry_form("приход", "abc", "x", "2025-01-01")
        summary = validator.get_user_friendly_summary(result)
        assert "Amount must be a number" in summary
        assert "12,50" in summary

    def test_warnings_listed(self, validator):
        result = validator.validate_entry_form("приход", "50000", "x", "2025-01-01")
        summary = validator.get_user_friendly_summary(result)
        assert "unusually high" in summary
        assert "saved anyway" in summary
