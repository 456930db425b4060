"""
Report Builder

DESIGN DECISION: Reports are computed DETERMINISTICALLY from a snapshot
of the cash book that the caller already fetched. Month and year are
matched against the calendar date of each entry, not against elapsed
time windows.

Month/year coming from a form are parsed here, before anything is
fetched, so a bad range never reaches the store.
"""

from typing import Union

from src.ledger.aggregator import (
    EntrySnapshot,
    entries_for_year,
    order_entries,
    sum_by_type,
)
from src.models.ledger import EntryType, MonthlyReport, YearlySummary


class InvalidRangeError(ValueError):
    """Month outside 1..12, or a month/year that is not a number."""
    pass


def _parse_int(value: Union[str, int, None], name: str) -> int:
    if isinstance(value, bool):
        raise InvalidRangeError(f"{name} must be a number, got {value!r}")
    if isinstance(value, int):
        return value
    if value is None or not str(value).strip():
        raise InvalidRangeError(f"{name} is required")
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidRangeError(f"{name} must be a number, got {value!r}")


def validate_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise InvalidRangeError(f"Month must be between 1 and 12, got {month}")


def parse_period(
    month: Union[str, int, None],
    year: Union[str, int, None],
) -> tuple[int, int]:
    """
    Turn form input into a (month, year) pair.

    Raises:
        InvalidRangeError: If either value is missing, not a number,
            or the month is outside 1..12
    """
    parsed_month = _parse_int(month, "Month")
    parsed_year = _parse_int(year, "Year")
    validate_month(parsed_month)
    return parsed_month, parsed_year


def parse_year(year: Union[str, int, None]) -> int:
    return _parse_int(year, "Year")


def monthly_report(entries: EntrySnapshot, month: int, year: int) -> MonthlyReport:
    """
    Entries of one calendar month with their income/expense totals.

    An empty month is a valid report with zero totals.

    Raises:
        InvalidRangeError: If month is outside 1..12
    """
    validate_month(month)

    in_month = [
        e for e in order_entries(entries)
        if e.date.year == year and e.date.month == month
    ]

    return MonthlyReport(
        month=month,
        year=year,
        entries=in_month,
        total_income=sum_by_type(in_month, EntryType.INCOME),
        total_expense=sum_by_type(in_month, EntryType.EXPENSE),
    )


def yearly_summary(entries: EntrySnapshot, year: int) -> YearlySummary:
    """Income, expense and profit for one calendar year."""
    in_year = entries_for_year(entries, year)
    return YearlySummary(
        year=year,
        total_income=sum_by_type(in_year, EntryType.INCOME),
        total_expense=sum_by_type(in_year, EntryType.EXPENSE),
    )


def available_years(entries: EntrySnapshot) -> list[int]:
    """Calendar years that have at least one entry, newest first."""
    return sorted({e.date.year for e in order_entries(entries)}, reverse=True)
