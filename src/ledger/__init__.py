"""
Ledger Core

Pure, synchronous business rules over in-memory snapshots:
currency cutover, expense categorization, period rollups and
reservation paging.
"""

from src.ledger.aggregator import (
    balance_by_period,
    cumulative,
    cumulative_series,
    entries_for_year,
    expenses_by_description,
    group_by_period,
    order_entries,
    sum_by_type,
    top_categories,
)
from src.ledger.bookings import (
    current_bookings,
    first_upcoming_page,
    order_bookings,
    paginate,
    summarize_bookings,
    total_pages,
    upcoming_bookings,
)
from src.ledger.categorizer import (
    CATEGORY_RULES,
    DEFAULT_CATEGORY,
    CategoryRule,
    all_categories,
    categorize,
)
from src.ledger.currency import (
    EURO_ADOPTION_YEAR,
    currency_for,
    format_amount,
    format_currency_totals,
    round_for_display,
    totals_by_currency,
)

__all__ = [
    # Aggregation
    "balance_by_period",
    "cumulative",
    "cumulative_series",
    "entries_for_year",
    "expenses_by_description",
    "group_by_period",
    "order_entries",
    "sum_by_type",
    "top_categories",
    # Bookings
    "current_bookings",
    "first_upcoming_page",
    "order_bookings",
    "paginate",
    "summarize_bookings",
    "total_pages",
    "upcoming_bookings",
    # Categorization
    "CATEGORY_RULES",
    "DEFAULT_CATEGORY",
    "CategoryRule",
    "all_categories",
    "categorize",
    # Currency
    "EURO_ADOPTION_YEAR",
    "currency_for",
    "format_amount",
    "format_currency_totals",
    "round_for_display",
    "totals_by_currency",
]
