"""Ordering, paging and dashboard splits for reservations."""

import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import TypeVar, Union

from src.models.ledger import Booking, BookingsSummary

T = TypeVar("T")

BookingSnapshot = Union[Mapping[str, Booking], Iterable[Booking]]


def order_bookings(bookings: BookingSnapshot) -> list[Booking]:
    """Bookings by start date, then id."""
    if isinstance(bookings, Mapping):
        bookings = bookings.values()
    return sorted(bookings, key=lambda b: (b.start_date, b.id))


def current_bookings(bookings: Iterable[Booking], today: date) -> list[Booking]:
    """Stays that include `today`."""
    return [b for b in bookings if b.start_date <= today <= b.end_date]


def upcoming_bookings(bookings: Iterable[Booking], today: date) -> list[Booking]:
    return [b for b in bookings if b.start_date > today]


def summarize_bookings(
    bookings: BookingSnapshot,
    today: date,
    limit: int = 5,
) -> BookingsSummary:
    """
    Dashboard split of the next open reservations.

    Takes the first `limit` non-completed bookings by start date and
    splits them into stays in progress and stays yet to start.
    """
    open_bookings = [b for b in order_bookings(bookings) if not b.completed][:limit]
    return BookingsSummary(
        current=current_bookings(open_bookings, today),
        upcoming=upcoming_bookings(open_bookings, today),
    )


def total_pages(item_count: int, per_page: int) -> int:
    if per_page < 1:
        raise ValueError(f"per_page must be positive, got {per_page}")
    return max(1, math.ceil(item_count / per_page))


def paginate(items: Sequence[T], page: int, per_page: int) -> list[T]:
    """Items on 1-based `page`; pages past the end are empty."""
    if page < 1:
        raise ValueError(f"page must be at least 1, got {page}")
    start = (page - 1) * per_page
    return list(items[start:start + per_page])


def first_upcoming_page(
    ordered: Sequence[Booking],
    today: date,
    per_page: int,
) -> int:
    """
    Page holding the first booking starting today or later.

    Falls back to the last page when every booking is in the past.
    """
    for index, booking in enumerate(ordered):
        if booking.start_date >= today:
            return index // per_page + 1
    return total_pages(len(ordered), per_page)
