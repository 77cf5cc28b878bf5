from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional

from .goals import days_elapsed_in_year
from .models import BookHighlight, ReadingStats, ShelfBook, ShelfCounts, ShelfEntry, ShelfStatus
from .progress import round_half_up

STREAK_WINDOW_DAYS = 30


def count_by_status(entries: Iterable[ShelfEntry]) -> ShelfCounts:
    counts = ShelfCounts()
    for entry in entries:
        if entry.status == ShelfStatus.WANT_TO_READ:
            counts.want_to_read += 1
        elif entry.status == ShelfStatus.CURRENTLY_READING:
            counts.currently_reading += 1
        elif entry.status == ShelfStatus.READ:
            counts.read += 1
        elif entry.status == ShelfStatus.DNF:
            counts.dnf += 1
    return counts


def reading_streak(activity_dates: Iterable[date], today: date, window: int = STREAK_WINDOW_DAYS) -> int:
    """
    Count consecutive active days backwards from today. A quiet today does not
    break the streak; the first quiet day before it does.
    """
    active = set(activity_dates)
    streak = 0
    for offset in range(window):
        day = today - timedelta(days=offset)
        if day in active:
            streak += 1
        elif offset > 0:
            break
    return streak


def local_date(moment: datetime, zone: Optional[tzinfo] = None) -> date:
    """Calendar date of a stored timestamp in ``zone``. Naive timestamps are UTC."""
    if zone is None:
        return moment.date()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(zone).date()


def _favorite_genre(read_books: List[ShelfBook]) -> Optional[str]:
    counter: Counter = Counter()
    for item in read_books:
        counter.update(item.book.genres)
    if not counter:
        return None
    # most_common keeps first-seen order among ties
    return counter.most_common(1)[0][0]


def compute_stats(
    shelf_books: Iterable[ShelfBook],
    today: date,
    year: Optional[int] = None,
    zone: Optional[tzinfo] = None,
) -> ReadingStats:
    year = today.year if year is None else year
    books = list(shelf_books)
    read_books = [b for b in books if b.entry.status == ShelfStatus.READ]
    finished_this_year = [
        b for b in read_books if b.entry.finished_date is not None and b.entry.finished_date.year == year
    ]

    stats = ReadingStats()
    stats.books_read_this_year = len(finished_this_year)
    stats.pages_read_this_year = sum(b.book.page_count or 0 for b in finished_this_year)
    stats.currently_reading = sum(1 for b in books if b.entry.status == ShelfStatus.CURRENTLY_READING)
    stats.books_this_month = sum(
        1
        for b in finished_this_year
        if b.entry.finished_date.month == today.month and b.entry.finished_date.year == today.year
    )
    stats.avg_pages_per_day = round_half_up(
        stats.pages_read_this_year / max(1, days_elapsed_in_year(year, today))
    )

    window_start = today - timedelta(days=STREAK_WINDOW_DAYS)
    activity = [d for d in (local_date(b.entry.updated_at, zone) for b in books) if d >= window_start]
    stats.reading_streak = reading_streak(activity, today)

    sized = [b for b in read_books if b.book.page_count is not None]
    if sized:
        longest = max(sized, key=lambda b: b.book.page_count)
        stats.longest_book_read = BookHighlight(title=longest.book.title, pages=longest.book.page_count)
        stats.avg_book_length = round_half_up(sum(b.book.page_count for b in sized) / len(sized))

    stats.favorite_genre = _favorite_genre(read_books)
    stats.unique_authors_read = len({name for b in read_books for name in b.book.authors})

    timed = [
        b
        for b in read_books
        if b.entry.started_date is not None and b.entry.finished_date is not None
    ]
    if timed:
        durations = [(b.entry.finished_date - b.entry.started_date).days for b in timed]
        stats.avg_days_to_finish = round_half_up(sum(durations) / len(durations))
        fastest_index = min(range(len(timed)), key=lambda i: durations[i])
        stats.fastest_read = BookHighlight(title=timed[fastest_index].book.title, days=durations[fastest_index])
    return stats
