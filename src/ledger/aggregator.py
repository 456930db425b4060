"""
Ledger Aggregation

Pure functions over in-memory snapshots of cash book entries. Nothing
here touches the store; flows fetch the snapshot first and hand it over.

Period keys are ISO strings (YYYY, YYYY-MM, YYYY-MM-DD), so sorting
them as text sorts them chronologically.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Optional, Union

from src.ledger.categorizer import categorize
from src.models.ledger import (
    CategoryTotal,
    CumulativeSeries,
    Entry,
    EntryType,
    Granularity,
    PeriodTotals,
)

EntrySnapshot = Union[Mapping[str, Entry], Iterable[Entry]]


def _as_entries(entries: EntrySnapshot) -> list[Entry]:
    if isinstance(entries, Mapping):
        return list(entries.values())
    return list(entries)


def order_entries(entries: EntrySnapshot) -> list[Entry]:
    """
    Deterministic display order: by date, then by id.

    The store returns records in no particular order.
    """
    return sorted(_as_entries(entries), key=lambda e: (e.date, e.id))


def entries_for_year(entries: EntrySnapshot, year: int) -> list[Entry]:
    return [e for e in _as_entries(entries) if e.date.year == year]


def sum_by_type(entries: EntrySnapshot, entry_type: EntryType) -> Decimal:
    """Sum of amounts of the given type; 0 for no entries."""
    return sum(
        (e.amount for e in _as_entries(entries) if e.type == entry_type),
        Decimal("0"),
    )


def period_key(entry: Entry, granularity: Granularity) -> str:
    if granularity == Granularity.DAY:
        return entry.date.isoformat()
    if granularity == Granularity.MONTH:
        return f"{entry.date.year:04d}-{entry.date.month:02d}"
    return f"{entry.date.year:04d}"


def group_by_period(
    entries: EntrySnapshot,
    granularity: Granularity,
) -> dict[str, PeriodTotals]:
    """
    Bucket entries by truncated date.

    Returns an ordered mapping of period key to income/expense totals,
    keys ascending.
    """
    groups: dict[str, PeriodTotals] = {}
    for entry in _as_entries(entries):
        key = period_key(entry, granularity)
        totals = groups.setdefault(key, PeriodTotals())
        if entry.type == EntryType.INCOME:
            totals.income += entry.amount
        else:
            totals.expense += entry.amount
    return {key: groups[key] for key in sorted(groups)}


def cumulative(series: Iterable[Decimal]) -> list[Decimal]:
    """Running prefix sums: [a, b, c] -> [a, a+b, a+b+c]."""
    result = []
    running = Decimal("0")
    for value in series:
        running += value
        result.append(running)
    return result


def cumulative_series(
    entries: EntrySnapshot,
    granularity: Granularity = Granularity.DAY,
) -> CumulativeSeries:
    """Running income and expense totals, one point per period."""
    grouped = group_by_period(entries, granularity)
    return CumulativeSeries(
        labels=list(grouped),
        income=cumulative(t.income for t in grouped.values()),
        expense=cumulative(t.expense for t in grouped.values()),
    )


def balance_by_period(
    entries: EntrySnapshot,
    granularity: Granularity = Granularity.MONTH,
) -> dict[str, Decimal]:
    """Income minus expense per period, keys ascending."""
    return {
        key: totals.balance
        for key, totals in group_by_period(entries, granularity).items()
    }


def expenses_by_description(entries: EntrySnapshot) -> dict[str, Decimal]:
    """Expense amounts summed per exact description, in first-seen order."""
    totals: dict[str, Decimal] = {}
    for entry in _as_entries(entries):
        if entry.type != EntryType.EXPENSE:
            continue
        totals[entry.description] = totals.get(entry.description, Decimal("0")) + entry.amount
    return totals


def top_categories(
    entries: EntrySnapshot,
    n: int,
    year: Optional[int] = None,
) -> list[CategoryTotal]:
    """
    Rank expense categories by amount.

    Every expense is categorized and summed per category; the percentage
    is the category's share of all expenses considered, computed before
    truncation. Entries are walked in (date, id) order, so ties keep the
    order in which categories were first seen regardless of store order.

    Args:
        entries: Snapshot of entries (income entries are ignored)
        n: Maximum number of categories to return
        year: Restrict to expenses dated in this calendar year

    Raises:
        ValueError: If n is negative
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")

    expenses = [
        e for e in order_entries(entries)
        if e.type == EntryType.EXPENSE and (year is None or e.date.year == year)
    ]

    by_category: dict[str, Decimal] = {}
    for entry in expenses:
        category = categorize(entry.description)
        by_category[category] = by_category.get(category, Decimal("0")) + entry.amount

    total = sum(by_category.values(), Decimal("0"))
    ranked = sorted(by_category.items(), key=lambda item: item[1], reverse=True)

    return [
        CategoryTotal(
            category=category,
            amount=amount,
            percentage=float(amount / total * 100) if total > 0 else 0.0,
        )
        for category, amount in ranked[:n]
    ]
