from __future__ import annotations

import logging
from copy import deepcopy
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from .calendar import build_calendar
from .catalog import Catalog
from .errors import InvalidQuery, InvalidRating, NotFound, StoreConflict
from .export import export_csv, export_json
from .goals import compute_goal_pace, count_books_read, validate_goal
from .invalidation import (
    GOAL_CHANGE_VIEWS,
    PROGRESS_CHANGE_VIEWS,
    RATING_CHANGE_VIEWS,
    STATUS_CHANGE_VIEWS,
    ReadView,
    ReadViewCache,
)
from .listing import ShelfSort, filter_shelf_books, sort_shelf_books, year_options
from .models import (
    BookSummary,
    GoalPace,
    ReadingCalendar,
    ReadingGoal,
    ReadingStats,
    ShelfBook,
    ShelfCounts,
    ShelfEntry,
    ShelfStatus,
    parse_status,
)
from .progress import apply_progress, progress_percent
from .repository import ShelfRepository
from .stats import compute_stats, count_by_status
from .status_machine import transition

logger = logging.getLogger(__name__)

MAX_STATUS_LOOKUP = 100
MAX_CURRENTLY_READING = 20
WRITE_ATTEMPTS = 2


def zone_today(tz_name: str = "UTC") -> Callable[[], date]:
    """Return a clock giving today's date in a single configured zone."""
    zone = ZoneInfo(tz_name)

    def today() -> date:
        return datetime.now(zone).date()

    return today


class ShelfService:
    """
    Shelf operations for one resolved user at a time.

    Writes go through the status machine or progress tracker, then a single
    conditional upsert. A lost race is retried once against a fresh read; a
    second loss is surfaced as StoreConflict. After each committed write only
    the read views that write can affect are invalidated.
    """

    def __init__(
        self,
        repository: ShelfRepository,
        catalog: Catalog,
        today: Optional[Callable[[], date]] = None,
        view_cache: Optional[ReadViewCache] = None,
        zone: Optional[tzinfo] = None,
    ):
        self.repo = repository
        self.catalog = catalog
        self.today = today or zone_today()
        # zone of ``today``; stored timestamps are read back as dates in it
        self.zone = zone or timezone.utc
        self.views = view_cache if view_cache is not None else ReadViewCache()

    # region helpers
    def _require_book(self, book_id: int) -> BookSummary:
        book = self.catalog.get_book(book_id)
        if not book:
            raise NotFound(f"Book not found: {book_id}")
        return book

    def _load_entry(self, user_id: str, book_id: int, book: BookSummary) -> Optional[ShelfEntry]:
        entry = self.repo.get_entry(user_id, book_id)
        if entry:
            entry.page_count = book.page_count
        return entry

    def _write(
        self,
        user_id: str,
        book: BookSummary,
        apply: Callable[[Optional[ShelfEntry]], Optional[ShelfEntry]],
        views: Iterable[ReadView],
    ) -> Optional[ShelfEntry]:
        for attempt in range(1, WRITE_ATTEMPTS + 1):
            current = self._load_entry(user_id, book.book_id, book)
            updated = apply(current)
            try:
                if updated is None:
                    if current is not None:
                        self.repo.delete_entry(user_id, book.book_id)
                    saved = None
                else:
                    saved = self.repo.save_entry(updated, current.version if current else None)
                    saved.page_count = book.page_count
            except StoreConflict:
                if attempt == WRITE_ATTEMPTS:
                    logger.error("Giving up on book %s for user %s after %d conflicts", book.book_id, user_id, attempt)
                    raise
                logger.warning("Write conflict on book %s for user %s, retrying", book.book_id, user_id)
                continue
            self.views.invalidate(user_id, views)
            return saved
        return None

    def _cached(self, user_id: str, view: ReadView, key: Hashable, compute: Callable[[], object]):
        return deepcopy(self.views.get_or_compute(user_id, view, key, compute))

    def _shelf_books(self, user_id: str, status: Optional[ShelfStatus] = None) -> List[ShelfBook]:
        entries = self.repo.list_entries(user_id, status)
        books = self.catalog.get_books(e.book_id for e in entries)
        result = []
        for entry in entries:
            book = books.get(entry.book_id)
            if not book:
                # catalog no longer knows the book; leave it out of the views
                continue
            entry.page_count = book.page_count
            result.append(ShelfBook(entry=entry, book=book))
        return result

    # endregion

    # region writes
    def update_status(
        self,
        user_id: str,
        book_id: int,
        status,
        current_page: Optional[int] = None,
    ) -> Optional[ShelfEntry]:
        new_status = parse_status(status)
        book = self._require_book(book_id)
        on_date = self.today()

        def apply(current: Optional[ShelfEntry]) -> Optional[ShelfEntry]:
            return transition(
                current,
                new_status,
                on_date,
                current_page,
                user_id=user_id,
                book_id=book_id,
                page_count=book.page_count,
            )

        saved = self._write(user_id, book, apply, STATUS_CHANGE_VIEWS)
        logger.info(
            "User %s moved book %s to %s",
            user_id,
            book_id,
            new_status.value if new_status else "no shelf",
        )
        return saved

    def update_progress(self, user_id: str, book_id: int, current_page: int) -> ShelfEntry:
        book = self._require_book(book_id)

        def apply(current: Optional[ShelfEntry]) -> ShelfEntry:
            if current is None:
                raise NotFound(f"Book {book_id} is not on your shelves")
            return apply_progress(current, current_page)

        saved = self._write(user_id, book, apply, PROGRESS_CHANGE_VIEWS)
        logger.info("User %s is on page %s of book %s", user_id, current_page, book_id)
        return saved

    def update_rating(self, user_id: str, book_id: int, rating: int) -> ShelfEntry:
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidRating(f"Rating must be an integer between 1 and 5, got {rating!r}")
        book = self._require_book(book_id)

        def apply(current: Optional[ShelfEntry]) -> ShelfEntry:
            if current is None:
                entry = transition(
                    None,
                    ShelfStatus.WANT_TO_READ,
                    self.today(),
                    user_id=user_id,
                    book_id=book_id,
                    page_count=book.page_count,
                )
            else:
                entry = deepcopy(current)
            entry.rating = rating
            return entry

        views = RATING_CHANGE_VIEWS if self.repo.get_entry(user_id, book_id) else STATUS_CHANGE_VIEWS
        return self._write(user_id, book, apply, views)

    def remove_from_shelf(self, user_id: str, book_id: int) -> None:
        if self.repo.get_entry(user_id, book_id) is None:
            raise NotFound("Book not found in your library")
        book = self.catalog.get_book(book_id) or BookSummary(book_id=book_id, title="")
        self._write(user_id, book, lambda current: None, STATUS_CHANGE_VIEWS)
        logger.info("User %s removed book %s from shelves", user_id, book_id)

    def set_reading_goal(self, user_id: str, goal: int) -> ReadingGoal:
        validate_goal(goal)
        year = self.today().year
        self.repo.save_goal(ReadingGoal(user_id=user_id, year=year, goal=goal))
        self.views.invalidate(user_id, GOAL_CHANGE_VIEWS)
        logger.info("User %s set a %s goal of %s books", user_id, year, goal)
        return self.get_reading_goal(user_id, year)

    # endregion

    # region reads
    def get_entry(self, user_id: str, book_id: int) -> Optional[ShelfEntry]:
        entry = self.repo.get_entry(user_id, book_id)
        if entry:
            book = self.catalog.get_book(book_id)
            entry.page_count = book.page_count if book else None
        return entry

    def get_status_for_books(self, user_id: str, book_ids: List[int]) -> Dict[int, Dict[str, object]]:
        if len(book_ids) > MAX_STATUS_LOOKUP:
            raise InvalidQuery(f"At most {MAX_STATUS_LOOKUP} book ids can be looked up at once")
        wanted = set(book_ids)
        if not wanted:
            return {}
        return {
            e.book_id: {"status": e.status, "current_page": e.current_page}
            for e in self.repo.list_entries(user_id)
            if e.book_id in wanted
        }

    def get_reading_goal(self, user_id: str, year: Optional[int] = None) -> Optional[ReadingGoal]:
        year = self.today().year if year is None else year

        def compute() -> Optional[ReadingGoal]:
            goal = self.repo.get_goal(user_id, year)
            if not goal:
                return None
            goal.books_read = count_books_read(self.repo.list_entries(user_id, ShelfStatus.READ), year)
            return goal

        return self._cached(user_id, ReadView.GOAL, year, compute)

    def get_goal_pace(self, user_id: str) -> GoalPace:
        today = self.today()
        goal = self.get_reading_goal(user_id, today.year)
        if goal is None:
            books_read = count_books_read(self.repo.list_entries(user_id, ShelfStatus.READ), today.year)
            return compute_goal_pace(0, books_read, today.year, today)
        return compute_goal_pace(goal.goal, goal.books_read, today.year, today)

    def get_shelf_counts(self, user_id: str) -> ShelfCounts:
        return self._cached(
            user_id,
            ReadView.SHELF_COUNTS,
            None,
            lambda: count_by_status(self.repo.list_entries(user_id)),
        )

    def get_shelf_books(
        self,
        user_id: str,
        status,
        sort: ShelfSort = ShelfSort.DATE_ADDED,
        search: Optional[str] = None,
        min_rating: Optional[int] = None,
        finished_year: Optional[int] = None,
    ) -> List[ShelfBook]:
        shelf = parse_status(status)
        if shelf is None:
            return []
        books = self._cached(user_id, ReadView.SHELF_BOOKS, shelf, lambda: self._shelf_books(user_id, shelf))
        books = filter_shelf_books(books, search=search, min_rating=min_rating, finished_year=finished_year)
        return sort_shelf_books(books, ShelfSort(sort))

    def get_shelves(self, user_id: str) -> Dict[ShelfStatus, List[ShelfBook]]:
        return {status: self.get_shelf_books(user_id, status) for status in ShelfStatus}

    def get_finish_years(self, user_id: str) -> List[int]:
        return year_options(self._shelf_books(user_id, ShelfStatus.READ))

    def get_reading_calendar(self, user_id: str, year: int, month: int) -> ReadingCalendar:
        if not 1 <= month <= 12:
            raise InvalidQuery(f"Month must be between 1 and 12, got {month}")
        return self._cached(
            user_id,
            ReadView.CALENDAR,
            (year, month),
            lambda: build_calendar(self._shelf_books(user_id, ShelfStatus.READ), year, month),
        )

    def get_stats(self, user_id: str) -> ReadingStats:
        today = self.today()
        return self._cached(
            user_id,
            ReadView.STATS,
            today,
            lambda: compute_stats(self._shelf_books(user_id), today, zone=self.zone),
        )

    def get_currently_reading(self, user_id: str, limit: int = 6) -> List[Tuple[ShelfBook, int]]:
        if not 1 <= limit <= MAX_CURRENTLY_READING:
            raise InvalidQuery(f"Limit must be between 1 and {MAX_CURRENTLY_READING}, got {limit}")

        def compute() -> List[Tuple[ShelfBook, int]]:
            books = self._shelf_books(user_id, ShelfStatus.CURRENTLY_READING)[:limit]
            return [(b, progress_percent(b.entry.current_page, b.book.page_count)) for b in books]

        return self._cached(user_id, ReadView.CURRENTLY_READING, limit, compute)

    def export_shelf(
        self,
        user_id: str,
        status,
        fmt: str = "csv",
        book_ids: Optional[Iterable[int]] = None,
    ) -> str:
        """Export a shelf, or only the selected ``book_ids`` on it."""
        books = self.get_shelf_books(user_id, status)
        if book_ids is not None:
            selected = set(book_ids)
            books = [b for b in books if b.book.book_id in selected]
        if fmt == "csv":
            return export_csv(books)
        if fmt == "json":
            return export_json(books)
        raise InvalidQuery(f"Unsupported export format: {fmt}")

    # endregion
