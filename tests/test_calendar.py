from datetime import date

import pytest

from reading_tracker.shelves import BookSummary, InvalidQuery, ShelfBook, ShelfEntry, ShelfStatus, build_calendar


def _read(book_id, title, finished, status=ShelfStatus.READ, rating=None):
    return ShelfBook(
        entry=ShelfEntry(
            user_id="u",
            book_id=book_id,
            status=status,
            finished_date=finished,
            rating=rating,
            id=book_id * 10,
        ),
        book=BookSummary(book_id=book_id, title=title, page_count=100 + book_id),
    )


def _books():
    return [
        _read(3, "Third", date(2024, 3, 19)),
        _read(1, "First", date(2024, 3, 5), rating=4),
        _read(2, "Second", date(2024, 3, 5)),
        _read(4, "February", date(2024, 2, 28)),
        _read(5, "Dropped", date(2024, 3, 6), status=ShelfStatus.DNF),
        _read(6, "Last year", date(2023, 3, 5)),
    ]


def test_calendar_groups_by_finish_day():
    calendar = build_calendar(_books(), 2024, 3)
    assert calendar.total_books == 3
    assert list(calendar.books_by_day) == ["2024-03-05", "2024-03-19"]
    assert [b.title for b in calendar.books_by_day["2024-03-05"]] == ["First", "Second"]
    assert [b.title for b in calendar.books_by_day["2024-03-19"]] == ["Third"]

    first = calendar.books_by_day["2024-03-05"][0]
    assert first.entry_id == 10
    assert first.book_id == 1
    assert first.rating == 4
    assert first.page_count == 101


def test_calendar_total_matches_days():
    calendar = build_calendar(_books(), 2024, 3)
    assert calendar.total_books == sum(len(books) for books in calendar.books_by_day.values())


def test_calendar_empty_month():
    calendar = build_calendar(_books(), 2024, 4)
    assert calendar.books_by_day == {}
    assert calendar.total_books == 0


@pytest.mark.parametrize("month", [0, 13])
def test_calendar_rejects_bad_month(month):
    with pytest.raises(InvalidQuery):
        build_calendar(_books(), 2024, month)
