from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional

from .models import ShelfBook
from .progress import progress_percent


class ShelfSort(str, Enum):
    DATE_ADDED = "dateAdded"
    TITLE = "title"
    AUTHOR = "author"
    RATING_DESC = "ratingDesc"
    RATING_ASC = "ratingAsc"
    PAGES_DESC = "pagesDesc"
    PAGES_ASC = "pagesAsc"
    PROGRESS = "progress"


def authors_label(item: ShelfBook) -> str:
    return ", ".join(item.book.authors)


def filter_shelf_books(
    books: Iterable[ShelfBook],
    search: Optional[str] = None,
    min_rating: Optional[int] = None,
    finished_year: Optional[int] = None,
) -> List[ShelfBook]:
    needle = search.strip().lower() if search else ""
    result = []
    for item in books:
        if needle and needle not in item.book.title.lower() and needle not in authors_label(item).lower():
            continue
        if min_rating is not None and (item.entry.rating or 0) < min_rating:
            continue
        if finished_year is not None and (
            item.entry.finished_date is None or item.entry.finished_date.year != finished_year
        ):
            continue
        result.append(item)
    return result


def _nulls_last(value, descending: bool = False):
    if value is None:
        return (1, 0)
    return (0, -value if descending else value)


def sort_shelf_books(books: Iterable[ShelfBook], sort: ShelfSort = ShelfSort.DATE_ADDED) -> List[ShelfBook]:
    items = list(books)
    if sort == ShelfSort.TITLE:
        items.sort(key=lambda b: b.book.title.lower())
    elif sort == ShelfSort.AUTHOR:
        items.sort(key=lambda b: authors_label(b).lower())
    elif sort == ShelfSort.RATING_DESC:
        items.sort(key=lambda b: _nulls_last(b.entry.rating, descending=True))
    elif sort == ShelfSort.RATING_ASC:
        items.sort(key=lambda b: _nulls_last(b.entry.rating))
    elif sort == ShelfSort.PAGES_DESC:
        items.sort(key=lambda b: _nulls_last(b.book.page_count, descending=True))
    elif sort == ShelfSort.PAGES_ASC:
        items.sort(key=lambda b: _nulls_last(b.book.page_count))
    elif sort == ShelfSort.PROGRESS:
        items.sort(key=lambda b: progress_percent(b.entry.current_page, b.book.page_count), reverse=True)
    # DATE_ADDED keeps store order
    return items


def year_options(books: Iterable[ShelfBook]) -> List[int]:
    years = {b.entry.finished_date.year for b in books if b.entry.finished_date is not None}
    return sorted(years, reverse=True)
