"""
Example: seed a catalog, move books across shelves and print the derived views
using SQLite-backed repositories.

Usage:
    python3 shelf_demo.py --books books.json --user me --goal 24

``books.json`` is a list of objects with ``book_id``, ``title`` and optional
``page_count``, ``authors``, ``genres``, ``cover_url``, ``date_published``,
plus an optional ``status`` and ``current_page`` to shelve the book with.
"""

import argparse
import json
from pathlib import Path
from zoneinfo import ZoneInfo

from reading_tracker.shelves import (
    BookSummary,
    ShelfService,
    SqlAlchemyCatalog,
    SqlAlchemyShelfRepository,
    zone_today,
)


def load_books(path: Path):
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--books", required=True, type=Path, help="JSON file with catalog books")
    parser.add_argument("--user", default="local-user", help="User id to shelve books for")
    parser.add_argument("--db", default=Path("./data/reading_tracker.db"), type=Path, help="SQLite DB path")
    parser.add_argument("--goal", default=None, type=int, help="Reading goal for the current year")
    parser.add_argument("--tz", default="UTC", help="Time zone used for finish dates")
    args = parser.parse_args()

    if not args.books.exists():
        raise FileNotFoundError(f"Books file not found: {args.books}")
    args.db.parent.mkdir(parents=True, exist_ok=True)

    db_url = f"sqlite+pysqlite:///{args.db}"
    catalog = SqlAlchemyCatalog(db_url)
    service = ShelfService(
        SqlAlchemyShelfRepository(db_url),
        catalog,
        today=zone_today(args.tz),
        zone=ZoneInfo(args.tz),
    )

    for raw in load_books(args.books):
        book = BookSummary(
            book_id=int(raw["book_id"]),
            title=raw["title"],
            page_count=raw.get("page_count"),
            cover_url=raw.get("cover_url"),
            authors=raw.get("authors", []),
            genres=raw.get("genres", []),
            date_published=raw.get("date_published"),
        )
        catalog.add_book(book)
        if raw.get("status"):
            entry = service.update_status(args.user, book.book_id, raw["status"], raw.get("current_page"))
            if entry:
                print(f"{book.title}: {entry.status.value} (page {entry.current_page}/{entry.page_count})")

    if args.goal is not None:
        service.set_reading_goal(args.user, args.goal)

    today = service.today()
    counts = service.get_shelf_counts(args.user)
    print(
        f"Shelves: want={counts.want_to_read} current={counts.currently_reading} "
        f"read={counts.read} dnf={counts.dnf}"
    )
    pace = service.get_goal_pace(args.user)
    if pace.goal:
        state = "ahead of" if pace.ahead_of_pace else "behind"
        print(f"Goal: {pace.books_read}/{pace.goal} ({pace.progress_percent}%), {pace.pace_delta} {state} pace")
    calendar = service.get_reading_calendar(args.user, today.year, today.month)
    print(f"Finished this month: {calendar.total_books}")
    for day, books in sorted(calendar.books_by_day.items()):
        print(f"  {day}: {', '.join(b.title for b in books)}")
    stats = service.get_stats(args.user)
    print(f"This year: {stats.books_read_this_year} books, {stats.pages_read_this_year} pages")


if __name__ == "__main__":
    main()
