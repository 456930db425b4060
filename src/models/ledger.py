"""
Core Data Models for the Cash Book

These models define the schemas for every record flowing between the
store, the aggregation core and the front end.

DESIGN DECISION: Records read from the store are plain pydantic models
keyed by the id the store assigned. Drafts carry the same fields without
an id; only the store hands out ids.

Entry types keep the values the hosted store has always held
("приход" / "разход") so existing data reads back unchanged.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

# Fields named `date` would shadow the type inside a class body.
CalendarDate = date


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntryType(str, Enum):
    """Direction of a cash book entry."""
    INCOME = "приход"
    EXPENSE = "разход"


class BookingSource(str, Enum):
    """Channel a reservation came through."""
    BOOKING = "Booking"
    AIRBNB = "Airbnb"
    DIRECT = "Direct"


class UpcomingExpenseType(str, Enum):
    """Tag used to split planned expenses on the tracker screen."""
    YANA = "Яна"
    OTHERS = "Others"


class CurrencyUnit(str, Enum):
    """
    Display currency.

    Bulgaria switches from the lev to the euro on 1 January 2026;
    the value is the symbol printed next to an amount.
    """
    BGN = "лв"
    EUR = "€"


class Granularity(str, Enum):
    """Truncation unit used when grouping entries by date."""
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


# =============================================================================
# STORED RECORDS
# =============================================================================

class EntryDraft(BaseModel):
    """A cash book entry that has not been stored yet."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: CalendarDate = Field(
        ...,
        description="Calendar date of the entry"
    )
    type: EntryType = Field(
        ...,
        description="Income or expense"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount in the currency of the entry's year"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Free-text description, used for categorization"
    )


class Entry(EntryDraft):
    """
    One dated income or expense record in the ledger.

    Immutable once created except for deletion.
    """
    id: str = Field(
        ...,
        min_length=1,
        description="Store-assigned identifier"
    )


class BookingDraft(BaseModel):
    """A reservation that has not been stored yet."""
    model_config = ConfigDict(str_strip_whitespace=True)

    source: BookingSource
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
    )
    start_date: date
    end_date: date
    completed: bool = Field(
        default=False,
        description="Only field expected to change after creation"
    )

    @model_validator(mode='after')
    def validate_dates(self) -> 'BookingDraft':
        """End of stay cannot precede the start."""
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class Booking(BookingDraft):
    """A reservation record with a completion flag."""
    id: str = Field(..., min_length=1)

    @property
    def nights(self) -> int:
        """Number of nights between start and end date."""
        return abs((self.end_date - self.start_date).days)


class UpcomingExpenseDraft(BaseModel):
    """A planned expense that has not been stored yet."""
    model_config = ConfigDict(str_strip_whitespace=True)

    date: CalendarDate
    description: str = Field(
        ...,
        min_length=1,
        max_length=500,
    )
    amount: Decimal = Field(..., gt=0)
    type: UpcomingExpenseType


class UpcomingExpense(UpcomingExpenseDraft):
    """
    A planned future expense.

    Can be copied into the cash book as an expense entry; the planned
    record itself stays where it is.
    """
    id: str = Field(..., min_length=1)


# =============================================================================
# DERIVED MODELS (never persisted)
# =============================================================================

class CategoryTotal(BaseModel):
    """Sum of expenses that fall into one category."""

    category: str
    amount: Decimal = Field(..., ge=0)
    percentage: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Share of the total expense (0-100)"
    )


class PeriodTotals(BaseModel):
    """Income and expense summed over one day, month or year."""

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


class CumulativeSeries(BaseModel):
    """Running totals of income and expense, one point per period."""

    labels: list[str] = Field(default_factory=list)
    income: list[Decimal] = Field(default_factory=list)
    expense: list[Decimal] = Field(default_factory=list)


class MonthlyReport(BaseModel):
    """
    Cash book report for one calendar month.

    The balance is always derived from the two totals.
    """

    month: int = Field(..., ge=1, le=12)
    year: int
    entries: list[Entry] = Field(default_factory=list)
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense

    @property
    def currency(self) -> CurrencyUnit:
        """Unit every amount of this report is shown in."""
        from src.ledger.currency import currency_for

        return currency_for(self.year)


class YearlySummary(BaseModel):
    """Income, expense and profit for one calendar year."""

    year: int
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")

    @property
    def profit(self) -> Decimal:
        return self.total_income - self.total_expense


class BookingsSummary(BaseModel):
    """Dashboard view of open reservations."""

    current: list[Booking] = Field(default_factory=list)
    upcoming: list[Booking] = Field(default_factory=list)


class UpcomingExpensesSummary(BaseModel):
    """Dashboard view of the next planned expenses."""

    expenses: list[UpcomingExpense] = Field(default_factory=list)
    totals: dict[CurrencyUnit, Decimal] = Field(default_factory=dict)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in a submitted form."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Outcome of validating one form submission.

    Only error-level issues block the store call; warnings are shown
    to the user and the record is still saved.
    """

    form: str = Field(
        ...,
        description="Which form was validated (entry, booking, upcoming_expense)"
    )
    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
