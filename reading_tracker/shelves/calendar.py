from __future__ import annotations

from typing import Iterable, List

from .errors import InvalidQuery
from .models import CalendarBook, ReadingCalendar, ShelfBook, ShelfStatus


def _finished_in_month(item: ShelfBook, year: int, month: int) -> bool:
    entry = item.entry
    return (
        entry.status == ShelfStatus.READ
        and entry.finished_date is not None
        and entry.finished_date.year == year
        and entry.finished_date.month == month
    )


def build_calendar(shelf_books: Iterable[ShelfBook], year: int, month: int) -> ReadingCalendar:
    """
    Group the books finished in ``year``/``month`` by ISO finish date.

    Days without finishes are left out of ``books_by_day``. Books finished on
    the same day keep their input order.
    """
    if not 1 <= month <= 12:
        raise InvalidQuery(f"Month must be between 1 and 12, got {month}")

    finished: List[ShelfBook] = [b for b in shelf_books if _finished_in_month(b, year, month)]
    finished.sort(key=lambda b: b.entry.finished_date)

    calendar = ReadingCalendar(year=year, month=month, total_books=len(finished))
    for item in finished:
        day = item.entry.finished_date.isoformat()
        calendar.books_by_day.setdefault(day, []).append(
            CalendarBook(
                entry_id=item.entry.id,
                book_id=item.book.book_id,
                title=item.book.title,
                cover_url=item.book.cover_url,
                page_count=item.book.page_count,
                rating=item.entry.rating,
            )
        )
    return calendar
