"""
Currency Policy

Amounts are stored as bare numbers; the unit is implied by the calendar
year of the record they belong to. Everything dated before 2026 is in
leva, everything from 2026 on is in euro.

Callers must pass the record's own year, never today's.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from src.models.ledger import CurrencyUnit

EURO_ADOPTION_YEAR = 2026

_CENT = Decimal("0.01")


def currency_for(year: int) -> CurrencyUnit:
    """Unit amounts dated in `year` are expressed in."""
    return CurrencyUnit.BGN if year < EURO_ADOPTION_YEAR else CurrencyUnit.EUR


def round_for_display(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal, year: int) -> str:
    """Render `amount` with two decimals and the unit of `year`."""
    return f"{round_for_display(amount)} {currency_for(year).value}"


def totals_by_currency(
    dated_amounts: Iterable[tuple[date, Decimal]],
) -> dict[CurrencyUnit, Decimal]:
    """
    Sum amounts per currency unit.

    Each amount counts towards the unit of its own date, so a list that
    spans the cutover produces two separate totals.
    """
    totals = {unit: Decimal("0") for unit in CurrencyUnit}
    for when, amount in dated_amounts:
        totals[currency_for(when.year)] += amount
    return totals


def format_currency_totals(totals: dict[CurrencyUnit, Decimal]) -> str:
    """
    Render per-currency totals as "12.00 лв + 3.50 €".

    Zero totals are left out; when nothing is left the result is "0.00 лв".
    """
    parts = [
        f"{round_for_display(totals[unit])} {unit.value}"
        for unit in CurrencyUnit
        if totals.get(unit, Decimal("0")) > 0
    ]
    return " + ".join(parts) or f"0.00 {CurrencyUnit.BGN.value}"
