"""
Shelf status transitions.

Every edge between two statuses (and to/from "no entry") is legal. What the
machine owns are the side effects on page progress and dates:

    into Read       -> current_page = page_count (when known), finished_date = on_date
    out of Read     -> current_page = 0, finished_date cleared
    into Reading    -> started_date = on_date if not already set
    into WantToRead -> started_date cleared
    same status     -> no-op (an explicit page still applies)
    to None         -> entry removed

An explicit page overrides the automatic page rules after validation.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Optional

from .models import ShelfEntry, ShelfStatus
from .progress import validate_page


def is_noop(previous: Optional[ShelfStatus], new_status: Optional[ShelfStatus]) -> bool:
    return previous == new_status


def transition(
    current: Optional[ShelfEntry],
    new_status: Optional[ShelfStatus],
    on_date: date,
    explicit_page: Optional[int] = None,
    *,
    user_id: Optional[str] = None,
    book_id: Optional[int] = None,
    page_count: Optional[int] = None,
) -> Optional[ShelfEntry]:
    """
    Apply a status change and return the resulting entry, or None when the
    book leaves the shelves. ``current`` is never modified.

    ``user_id``/``book_id`` are required only when ``current`` is None (first
    shelving). ``page_count`` defaults to the current entry's page count.
    """
    if current is not None and page_count is None:
        page_count = current.page_count
    previous = current.status if current is not None else None

    if explicit_page is not None:
        validate_page(explicit_page, page_count)

    if new_status is None:
        return None

    if current is None:
        if user_id is None or book_id is None:
            raise ValueError("user_id and book_id are required to create a shelf entry")
        entry = ShelfEntry(user_id=user_id, book_id=book_id, status=new_status, page_count=page_count)
    else:
        entry = replace(current, status=new_status, page_count=page_count)

    if not is_noop(previous, new_status):
        if new_status == ShelfStatus.READ:
            if page_count is not None:
                entry.current_page = page_count
            entry.finished_date = on_date
        elif previous == ShelfStatus.READ:
            entry.current_page = 0
            entry.finished_date = None

        if new_status == ShelfStatus.CURRENTLY_READING and entry.started_date is None:
            entry.started_date = on_date
        elif new_status == ShelfStatus.WANT_TO_READ:
            entry.started_date = None

    if explicit_page is not None:
        entry.current_page = explicit_page
    return entry
