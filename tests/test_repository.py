from datetime import date

import pytest

from reading_tracker.shelves import (
    BookSummary,
    InMemoryCatalog,
    InMemoryShelfRepository,
    ReadingGoal,
    ShelfEntry,
    ShelfStatus,
    SqlAlchemyCatalog,
    SqlAlchemyShelfRepository,
    StoreConflict,
)


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    if request.param == "memory":
        return InMemoryShelfRepository()
    return SqlAlchemyShelfRepository(f"sqlite+pysqlite:///{tmp_path / 'shelf.db'}")


def _entry(book_id=1, status=ShelfStatus.READ, user_id="reader-1", **kwargs):
    return ShelfEntry(user_id=user_id, book_id=book_id, status=status, **kwargs)


def test_insert_then_read_back(repo):
    saved = repo.save_entry(
        _entry(current_page=300, finished_date=date(2024, 3, 5), started_date=date(2024, 2, 1), rating=4),
        None,
    )
    assert saved.id is not None
    assert saved.version == 1

    loaded = repo.get_entry("reader-1", 1)
    assert loaded.status == ShelfStatus.READ
    assert loaded.current_page == 300
    assert loaded.finished_date == date(2024, 3, 5)
    assert loaded.started_date == date(2024, 2, 1)
    assert loaded.rating == 4
    assert loaded.version == 1
    assert repo.get_entry("reader-1", 2) is None
    assert repo.get_entry("reader-2", 1) is None


def test_update_bumps_version(repo):
    saved = repo.save_entry(_entry(status=ShelfStatus.CURRENTLY_READING), None)
    saved.current_page = 120
    updated = repo.save_entry(saved, saved.version)
    assert updated.version == 2
    assert updated.id == saved.id
    assert repo.get_entry("reader-1", 1).current_page == 120


def test_stale_version_is_rejected(repo):
    saved = repo.save_entry(_entry(status=ShelfStatus.CURRENTLY_READING), None)
    first = repo.get_entry("reader-1", 1)
    second = repo.get_entry("reader-1", 1)

    first.current_page = 50
    repo.save_entry(first, saved.version)

    second.current_page = 80
    with pytest.raises(StoreConflict):
        repo.save_entry(second, saved.version)
    stored = repo.get_entry("reader-1", 1)
    assert stored.current_page == 50
    assert stored.version == 2


def test_duplicate_insert_is_rejected(repo):
    repo.save_entry(_entry(), None)
    with pytest.raises(StoreConflict):
        repo.save_entry(_entry(status=ShelfStatus.DNF), None)
    assert repo.get_entry("reader-1", 1).status == ShelfStatus.READ


def test_update_of_missing_entry_is_rejected(repo):
    with pytest.raises(StoreConflict):
        repo.save_entry(_entry(), 1)
    assert repo.get_entry("reader-1", 1) is None


def test_list_entries_filters_by_user_and_status(repo):
    repo.save_entry(_entry(1, ShelfStatus.READ), None)
    repo.save_entry(_entry(2, ShelfStatus.WANT_TO_READ), None)
    repo.save_entry(_entry(3, ShelfStatus.READ), None)
    repo.save_entry(_entry(1, ShelfStatus.READ, user_id="reader-2"), None)

    assert sorted(e.book_id for e in repo.list_entries("reader-1")) == [1, 2, 3]
    assert sorted(e.book_id for e in repo.list_entries("reader-1", ShelfStatus.READ)) == [1, 3]
    assert [e.book_id for e in repo.list_entries("reader-2")] == [1]
    assert repo.list_entries("reader-3") == []


def test_delete_entry(repo):
    repo.save_entry(_entry(), None)
    assert repo.delete_entry("reader-1", 1) is True
    assert repo.get_entry("reader-1", 1) is None
    assert repo.delete_entry("reader-1", 1) is False
    # a removed book can be shelved again from scratch
    assert repo.save_entry(_entry(), None).version == 1


def test_goals_are_per_user_and_year(repo):
    assert repo.get_goal("reader-1", 2024) is None
    repo.save_goal(ReadingGoal(user_id="reader-1", year=2024, goal=24))
    repo.save_goal(ReadingGoal(user_id="reader-1", year=2024, goal=30))
    repo.save_goal(ReadingGoal(user_id="reader-1", year=2023, goal=12))

    assert repo.get_goal("reader-1", 2024).goal == 30
    assert repo.get_goal("reader-1", 2023).goal == 12
    assert repo.get_goal("reader-2", 2024) is None


def test_in_memory_repository_returns_copies():
    repo = InMemoryShelfRepository()
    saved = repo.save_entry(_entry(current_page=10), None)
    saved.current_page = 999
    loaded = repo.get_entry("reader-1", 1)
    loaded.rating = 1
    stored = repo.get_entry("reader-1", 1)
    assert stored.current_page == 10
    assert stored.rating is None


def test_sqlalchemy_repository_survives_reopen(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'shelf.db'}"
    SqlAlchemyShelfRepository(url).save_entry(_entry(current_page=42), None)
    reopened = SqlAlchemyShelfRepository(url)
    assert reopened.get_entry("reader-1", 1).current_page == 42


@pytest.mark.parametrize("kind", ["memory", "sqlite"])
def test_catalog_lookup(kind, tmp_path):
    if kind == "memory":
        catalog = InMemoryCatalog()
    else:
        catalog = SqlAlchemyCatalog(f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}")
    catalog.add_book(BookSummary(book_id=1, title="Dune", page_count=412, authors=["Frank Herbert"], genres=["SF"]))
    catalog.add_book(BookSummary(book_id=2, title="Emma"))

    dune = catalog.get_book(1)
    assert dune.title == "Dune"
    assert dune.page_count == 412
    assert dune.authors == ["Frank Herbert"]
    assert dune.genres == ["SF"]
    assert catalog.get_book(3) is None

    books = catalog.get_books([1, 2, 3])
    assert sorted(books) == [1, 2]
    assert books[2].authors == []
