from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


class ShelfStatus(str, Enum):
    WANT_TO_READ = "WantToRead"
    CURRENTLY_READING = "CurrentlyReading"
    READ = "Read"
    DNF = "DNF"


# Wire value clients send for "not on a shelf". It is never a
# ShelfStatus member; parse_status() maps it to None (no entry).
NO_STATUS = "None"


def parse_status(value: Optional[str]) -> Optional[ShelfStatus]:
    if value is None or value == NO_STATUS:
        return None
    if isinstance(value, ShelfStatus):
        return value
    return ShelfStatus(value)


@dataclass
class BookSummary:
    book_id: int
    title: str
    page_count: Optional[int] = None
    cover_url: Optional[str] = None
    authors: List[str] = field(default_factory=list)
    genres: List[str] = field(default_factory=list)
    date_published: Optional[str] = None


@dataclass
class ShelfEntry:
    user_id: str
    book_id: int
    status: ShelfStatus
    current_page: int = 0
    page_count: Optional[int] = None
    finished_date: Optional[date] = None
    started_date: Optional[date] = None
    rating: Optional[int] = None
    id: Optional[int] = None
    version: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class ShelfBook:
    entry: ShelfEntry
    book: BookSummary


@dataclass
class ReadingGoal:
    user_id: str
    year: int
    goal: int
    books_read: int = 0
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class CalendarBook:
    entry_id: Optional[int]
    book_id: int
    title: str
    cover_url: Optional[str]
    page_count: Optional[int]
    rating: Optional[int]


@dataclass
class ReadingCalendar:
    year: int
    month: int
    books_by_day: Dict[str, List[CalendarBook]] = field(default_factory=dict)
    total_books: int = 0


@dataclass
class GoalPace:
    goal: int
    books_read: int
    progress_percent: int
    days_elapsed: int
    days_remaining: int
    expected_books: int
    ahead_of_pace: bool
    pace_delta: int
    books_remaining: int
    required_pace_per_day: float
    goal_reached: bool
    books_over_goal: int = 0


@dataclass
class ShelfCounts:
    want_to_read: int = 0
    currently_reading: int = 0
    read: int = 0
    dnf: int = 0


@dataclass
class BookHighlight:
    title: str
    pages: Optional[int] = None
    days: Optional[int] = None


@dataclass
class ReadingStats:
    books_read_this_year: int = 0
    pages_read_this_year: int = 0
    currently_reading: int = 0
    books_this_month: int = 0
    avg_pages_per_day: int = 0
    reading_streak: int = 0
    longest_book_read: Optional[BookHighlight] = None
    favorite_genre: Optional[str] = None
    unique_authors_read: int = 0
    avg_book_length: int = 0
    avg_days_to_finish: int = 0
    fastest_read: Optional[BookHighlight] = None
