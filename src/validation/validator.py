"""
Form Validation

DESIGN DECISION: Every form is checked here before anything is sent to
the store:

- Required field presence
- Format validation (numbers, dates, enum values)
- Sanity checks that only warn (unusually large amounts)

Only error-level issues block the save. Warnings are shown to the user
and the record is still stored.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review. The one normalization it performs is
reading a comma as the decimal separator, the way amounts are typed in
Bulgarian.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from src.config import get_settings
from src.models.ledger import (
    BookingDraft,
    BookingSource,
    EntryDraft,
    EntryType,
    UpcomingExpenseDraft,
    UpcomingExpenseType,
    ValidationIssue,
    ValidationResult,
)

MAX_DESCRIPTION_LENGTH = 500


class FormValidationError(Exception):
    """A form had error-level issues; nothing was stored."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = [i.message for i in result.issues if i.severity == "error"]
        super().__init__("; ".join(messages) or "Form is invalid")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class FormValidator:
    """
    Validates raw form input for the three record kinds.

    Inputs may come straight from widgets (dates, floats, enum members)
    or from text fields (strings); both are accepted.
    """

    def __init__(self, max_entry_amount: Optional[float] = None):
        if max_entry_amount is None:
            max_entry_amount = get_settings().app.max_entry_amount
        self._max_amount = Decimal(str(max_entry_amount))

    # -------------------------------------------------------------------------
    # Field checks. Each returns the parsed value, or None after recording
    # an issue.
    # -------------------------------------------------------------------------

    def _check_amount(self, value: Any, issues: list[ValidationIssue]) -> Optional[Decimal]:
        if _is_blank(value):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
            ))
            return None

        if isinstance(value, bool):
            amount = None
        elif isinstance(value, Decimal):
            amount = value
        else:
            try:
                amount = Decimal(str(value).strip().replace(" ", "").replace(",", "."))
            except InvalidOperation:
                amount = None

        if amount is None or not amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Amount must be a number, got {value!r}",
                severity="error",
                suggested_fix="Use digits with a dot or comma, e.g. 12,50",
            ))
            return None

        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Record money going out as an expense, not a negative amount",
            ))
            return None

        if amount > self._max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        return amount

    def _check_description(self, value: Any, issues: list[ValidationIssue]) -> Optional[str]:
        if _is_blank(value):
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
            ))
            return None

        text = str(value).strip()
        if len(text) > MAX_DESCRIPTION_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                issue_type="too_long",
                message=f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
                severity="error",
            ))
            return None
        return text

    def _check_date(
        self,
        value: Any,
        field: str,
        label: str,
        issues: list[ValidationIssue],
    ) -> Optional[date]:
        if _is_blank(value):
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
                severity="error",
            ))
            return None

        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        try:
            return date.fromisoformat(str(value).strip()[:10])
        except ValueError:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{label} must be a date (YYYY-MM-DD), got {value!r}",
                severity="error",
            ))
            return None

    def _check_choice(
        self,
        value: Any,
        enum_type: type[Enum],
        field: str,
        label: str,
        issues: list[ValidationIssue],
    ) -> Optional[Enum]:
        if _is_blank(value):
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
                severity="error",
            ))
            return None

        try:
            return enum_type(value)
        except ValueError:
            allowed = ", ".join(member.value for member in enum_type)
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{label} must be one of: {allowed}",
                severity="error",
            ))
            return None

    # -------------------------------------------------------------------------
    # Forms
    # -------------------------------------------------------------------------

    def _entry_fields(self, type, amount, description, entry_date):
        issues: list[ValidationIssue] = []
        fields = {
            "type": self._check_choice(type, EntryType, "type", "Type", issues),
            "amount": self._check_amount(amount, issues),
            "description": self._check_description(description, issues),
            "date": self._check_date(entry_date, "date", "Date", issues),
        }
        return ValidationResult(form="entry", issues=issues), fields

    def validate_entry_form(
        self,
        type: Any,
        amount: Any,
        description: Any,
        entry_date: Any,
    ) -> ValidationResult:
        """Check a cash book entry form."""
        result, _ = self._entry_fields(type, amount, description, entry_date)
        return result

    def build_entry_draft(
        self,
        type: Any,
        amount: Any,
        description: Any,
        entry_date: Any,
    ) -> tuple[EntryDraft, ValidationResult]:
        """
        Validate an entry form and turn it into a draft.

        Returns:
            (draft, result). The result still carries any warnings.

        Raises:
            FormValidationError: If any error-level issue was found
        """
        result, fields = self._entry_fields(type, amount, description, entry_date)
        if result.has_errors:
            raise FormValidationError(result)
        return EntryDraft(**fields), result

    def _booking_fields(self, source, description, start_date, end_date):
        issues: list[ValidationIssue] = []
        fields = {
            "source": self._check_choice(source, BookingSource, "source", "Source", issues),
            "description": self._check_description(description, issues),
            "start_date": self._check_date(start_date, "start_date", "Start date", issues),
            "end_date": self._check_date(end_date, "end_date", "End date", issues),
        }
        if (
            fields["start_date"]
            and fields["end_date"]
            and fields["end_date"] < fields["start_date"]
        ):
            issues.append(ValidationIssue(
                field="end_date",
                issue_type="inconsistent",
                message="End date cannot be before start date",
                severity="error",
                suggested_fix="Please verify both dates",
            ))
        return ValidationResult(form="booking", issues=issues), fields

    def validate_booking_form(
        self,
        source: Any,
        description: Any,
        start_date: Any,
        end_date: Any,
    ) -> ValidationResult:
        """Check a reservation form."""
        result, _ = self._booking_fields(source, description, start_date, end_date)
        return result

    def build_booking_draft(
        self,
        source: Any,
        description: Any,
        start_date: Any,
        end_date: Any,
    ) -> tuple[BookingDraft, ValidationResult]:
        result, fields = self._booking_fields(source, description, start_date, end_date)
        if result.has_errors:
            raise FormValidationError(result)
        return BookingDraft(**fields), result

    def _upcoming_expense_fields(self, expense_date, description, amount, type):
        issues: list[ValidationIssue] = []
        fields = {
            "date": self._check_date(expense_date, "date", "Date", issues),
            "description": self._check_description(description, issues),
            "amount": self._check_amount(amount, issues),
            "type": self._check_choice(type, UpcomingExpenseType, "type", "Type", issues),
        }
        return ValidationResult(form="upcoming_expense", issues=issues), fields

    def validate_upcoming_expense_form(
        self,
        expense_date: Any,
        description: Any,
        amount: Any,
        type: Any,
    ) -> ValidationResult:
        """Check a planned expense form."""
        result, _ = self._upcoming_expense_fields(expense_date, description, amount, type)
        return result

    def build_upcoming_expense_draft(
        self,
        expense_date: Any,
        description: Any,
        amount: Any,
        type: Any,
    ) -> tuple[UpcomingExpenseDraft, ValidationResult]:
        result, fields = self._upcoming_expense_fields(expense_date, description, amount, type)
        if result.has_errors:
            raise FormValidationError(result)
        return UpcomingExpenseDraft(**fields), result

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what the front end shows next to the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        if not result.has_errors:
            lines.append("")
            lines.append("The record was saved anyway.")

        return "\n".join(lines)
