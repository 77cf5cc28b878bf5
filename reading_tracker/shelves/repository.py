from __future__ import annotations

import json
import threading
from copy import deepcopy
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    delete,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .errors import StoreConflict
from .models import BookSummary, ReadingGoal, ShelfEntry, ShelfStatus

Base = declarative_base()


class ShelfEntryModel(Base):
    __tablename__ = "shelf_entries"
    __table_args__ = (UniqueConstraint("user_id", "book_id", name="uq_shelf_user_book"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    book_id = Column(Integer, nullable=False)
    status = Column(Enum(ShelfStatus), nullable=False)
    current_page = Column(Integer, nullable=False, default=0)
    finished_date = Column(Date)
    started_date = Column(Date)
    rating = Column(Integer)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)


class ReadingGoalModel(Base):
    __tablename__ = "reading_goals"
    user_id = Column(String, primary_key=True)
    year = Column(Integer, primary_key=True)
    goal = Column(Integer, nullable=False)
    updated_at = Column(DateTime)


class CatalogBookModel(Base):
    __tablename__ = "catalog_books"
    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    page_count = Column(Integer)
    cover_url = Column(String)
    authors_json = Column(String)
    genres_json = Column(String)
    date_published = Column(String)

    def to_summary(self) -> BookSummary:
        return BookSummary(
            book_id=self.id,
            title=self.title,
            page_count=self.page_count,
            cover_url=self.cover_url,
            authors=json.loads(self.authors_json or "[]"),
            genres=json.loads(self.genres_json or "[]"),
            date_published=self.date_published,
        )


class ShelfRepository:
    """
    Persistence boundary for shelf entries and reading goals.

    ``save_entry`` is the only write path for entries and must be an atomic
    conditional upsert: ``expected_version=None`` means the entry must not
    exist yet, otherwise the stored version must match. A lost race raises
    StoreConflict and nothing is written.
    """

    # Shelf entries
    def get_entry(self, user_id: str, book_id: int) -> Optional[ShelfEntry]:
        raise NotImplementedError

    def list_entries(self, user_id: str, status: Optional[ShelfStatus] = None) -> List[ShelfEntry]:
        raise NotImplementedError

    def save_entry(self, entry: ShelfEntry, expected_version: Optional[int]) -> ShelfEntry:
        raise NotImplementedError

    def delete_entry(self, user_id: str, book_id: int) -> bool:
        raise NotImplementedError

    # Reading goals
    def get_goal(self, user_id: str, year: int) -> Optional[ReadingGoal]:
        raise NotImplementedError

    def save_goal(self, goal: ReadingGoal) -> None:
        raise NotImplementedError


class InMemoryShelfRepository(ShelfRepository):
    """
    Dict-backed store for local runs and tests. Keeps copies of dataclasses to
    avoid cross-mutation between calls; a lock makes save_entry atomic.
    """

    def __init__(self):
        self.entries: Dict[Tuple[str, int], ShelfEntry] = {}
        self.goals: Dict[Tuple[str, int], ReadingGoal] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def _clone(self, obj):
        return deepcopy(obj)

    def get_entry(self, user_id: str, book_id: int) -> Optional[ShelfEntry]:
        entry = self.entries.get((user_id, book_id))
        return self._clone(entry) if entry else None

    def list_entries(self, user_id: str, status: Optional[ShelfStatus] = None) -> List[ShelfEntry]:
        matches = [
            e for (uid, _), e in self.entries.items() if uid == user_id and (status is None or e.status == status)
        ]
        matches.sort(key=lambda e: (e.updated_at, e.id or 0))
        return [self._clone(e) for e in matches]

    def save_entry(self, entry: ShelfEntry, expected_version: Optional[int]) -> ShelfEntry:
        key = (entry.user_id, entry.book_id)
        with self._lock:
            existing = self.entries.get(key)
            if expected_version is None and existing is not None:
                raise StoreConflict(f"Shelf entry for book {entry.book_id} already exists")
            if expected_version is not None and (existing is None or existing.version != expected_version):
                raise StoreConflict(f"Shelf entry for book {entry.book_id} was modified concurrently")

            stored = self._clone(entry)
            now = datetime.utcnow()
            if existing is None:
                stored.id = self._next_id
                self._next_id += 1
                stored.created_at = now
            else:
                stored.id = existing.id
                stored.created_at = existing.created_at
            stored.version = (existing.version if existing else 0) + 1
            stored.updated_at = now
            self.entries[key] = stored
            return self._clone(stored)

    def delete_entry(self, user_id: str, book_id: int) -> bool:
        with self._lock:
            return self.entries.pop((user_id, book_id), None) is not None

    def get_goal(self, user_id: str, year: int) -> Optional[ReadingGoal]:
        goal = self.goals.get((user_id, year))
        return self._clone(goal) if goal else None

    def save_goal(self, goal: ReadingGoal) -> None:
        stored = self._clone(goal)
        stored.updated_at = datetime.utcnow()
        self.goals[(goal.user_id, goal.year)] = stored


class SqlAlchemyShelfRepository(ShelfRepository):
    """
    SQL-backed repository using SQLAlchemy. Works with SQLite/Postgres URLs.
    """

    def __init__(self, database_url: str):
        self.engine = create_engine(database_url, future=True)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)

    def _session(self) -> Session:
        return self.SessionLocal()

    @staticmethod
    def _to_entry(model: ShelfEntryModel, page_count: Optional[int] = None) -> ShelfEntry:
        return ShelfEntry(
            id=model.id,
            user_id=model.user_id,
            book_id=model.book_id,
            status=model.status,
            current_page=int(model.current_page or 0),
            page_count=page_count,
            finished_date=model.finished_date,
            started_date=model.started_date,
            rating=model.rating,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    # region Shelf entries
    def get_entry(self, user_id: str, book_id: int) -> Optional[ShelfEntry]:
        with self._session() as session:
            stmt = select(ShelfEntryModel).where(
                ShelfEntryModel.user_id == user_id, ShelfEntryModel.book_id == book_id
            )
            model = session.execute(stmt).scalar_one_or_none()
            return self._to_entry(model) if model else None

    def list_entries(self, user_id: str, status: Optional[ShelfStatus] = None) -> List[ShelfEntry]:
        with self._session() as session:
            stmt = select(ShelfEntryModel).where(ShelfEntryModel.user_id == user_id)
            if status is not None:
                stmt = stmt.where(ShelfEntryModel.status == status)
            stmt = stmt.order_by(ShelfEntryModel.updated_at, ShelfEntryModel.id)
            return [self._to_entry(m) for m in session.execute(stmt).scalars().all()]

    def save_entry(self, entry: ShelfEntry, expected_version: Optional[int]) -> ShelfEntry:
        now = datetime.utcnow()
        with self._session() as session:
            if expected_version is None:
                model = ShelfEntryModel(
                    user_id=entry.user_id,
                    book_id=entry.book_id,
                    status=entry.status,
                    current_page=entry.current_page,
                    finished_date=entry.finished_date,
                    started_date=entry.started_date,
                    rating=entry.rating,
                    version=1,
                    created_at=now,
                    updated_at=now,
                )
                session.add(model)
                try:
                    session.commit()
                except IntegrityError as exc:
                    session.rollback()
                    raise StoreConflict(f"Shelf entry for book {entry.book_id} already exists") from exc
                return self._to_entry(model, entry.page_count)

            stmt = (
                update(ShelfEntryModel)
                .where(
                    ShelfEntryModel.user_id == entry.user_id,
                    ShelfEntryModel.book_id == entry.book_id,
                    ShelfEntryModel.version == expected_version,
                )
                .values(
                    status=entry.status,
                    current_page=entry.current_page,
                    finished_date=entry.finished_date,
                    started_date=entry.started_date,
                    rating=entry.rating,
                    version=expected_version + 1,
                    updated_at=now,
                )
            )
            result = session.execute(stmt)
            if result.rowcount != 1:
                session.rollback()
                raise StoreConflict(f"Shelf entry for book {entry.book_id} was modified concurrently")
            session.commit()
            model = session.execute(
                select(ShelfEntryModel).where(
                    ShelfEntryModel.user_id == entry.user_id, ShelfEntryModel.book_id == entry.book_id
                )
            ).scalar_one()
            return self._to_entry(model, entry.page_count)

    def delete_entry(self, user_id: str, book_id: int) -> bool:
        with self._session() as session:
            result = session.execute(
                delete(ShelfEntryModel).where(
                    ShelfEntryModel.user_id == user_id, ShelfEntryModel.book_id == book_id
                )
            )
            session.commit()
            return result.rowcount > 0

    # endregion

    # region Reading goals
    def get_goal(self, user_id: str, year: int) -> Optional[ReadingGoal]:
        with self._session() as session:
            model = session.get(ReadingGoalModel, (user_id, year))
            if not model:
                return None
            return ReadingGoal(user_id=model.user_id, year=model.year, goal=model.goal, updated_at=model.updated_at)

    def save_goal(self, goal: ReadingGoal) -> None:
        with self._session() as session:
            model = ReadingGoalModel(
                user_id=goal.user_id,
                year=goal.year,
                goal=goal.goal,
                updated_at=datetime.utcnow(),
            )
            session.merge(model)
            session.commit()

    # endregion
