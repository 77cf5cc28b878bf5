from __future__ import annotations

import json
from copy import deepcopy
from typing import Dict, Iterable, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from .models import BookSummary
from .repository import Base, CatalogBookModel


class Catalog:
    """
    Read-only source of book facts (title, page count, cover, authors, genres).
    The shelf engine never writes to it; ``add_book`` exists only for seeding.
    """

    def get_book(self, book_id: int) -> Optional[BookSummary]:
        raise NotImplementedError

    def get_books(self, book_ids: Iterable[int]) -> Dict[int, BookSummary]:
        books = {}
        for book_id in book_ids:
            book = self.get_book(book_id)
            if book:
                books[book_id] = book
        return books


class InMemoryCatalog(Catalog):
    def __init__(self, books: Optional[Iterable[BookSummary]] = None):
        self.books: Dict[int, BookSummary] = {}
        for book in books or []:
            self.add_book(book)

    def add_book(self, book: BookSummary) -> None:
        self.books[book.book_id] = deepcopy(book)

    def get_book(self, book_id: int) -> Optional[BookSummary]:
        book = self.books.get(book_id)
        return deepcopy(book) if book else None


class SqlAlchemyCatalog(Catalog):
    def __init__(self, database_url: str):
        self.engine = create_engine(database_url, future=True)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)

    def _session(self) -> Session:
        return self.SessionLocal()

    def add_book(self, book: BookSummary) -> None:
        with self._session() as session:
            session.merge(
                CatalogBookModel(
                    id=book.book_id,
                    title=book.title,
                    page_count=book.page_count,
                    cover_url=book.cover_url,
                    authors_json=json.dumps(book.authors),
                    genres_json=json.dumps(book.genres),
                    date_published=book.date_published,
                )
            )
            session.commit()

    def get_book(self, book_id: int) -> Optional[BookSummary]:
        with self._session() as session:
            model = session.get(CatalogBookModel, book_id)
            return model.to_summary() if model else None

    def get_books(self, book_ids: Iterable[int]) -> Dict[int, BookSummary]:
        ids = list(book_ids)
        if not ids:
            return {}
        with self._session() as session:
            stmt = select(CatalogBookModel).where(CatalogBookModel.id.in_(ids))
            return {m.id: m.to_summary() for m in session.execute(stmt).scalars().all()}
