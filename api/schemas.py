from __future__ import annotations

from dataclasses import asdict
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from reading_tracker.shelves import (
    BookHighlight,
    GoalPace,
    ReadingCalendar,
    ReadingGoal,
    ReadingStats,
    ShelfBook,
    ShelfCounts,
    ShelfEntry,
)

StatusValue = Literal["WantToRead", "CurrentlyReading", "Read", "DNF", "None"]


class StatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: StatusValue
    current_page: Optional[int] = Field(None, ge=0, alias="currentPage")


class ProgressUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(..., ge=0, alias="currentPage")


class RatingUpdate(BaseModel):
    rating: int = Field(..., ge=1, le=5)


class GoalUpdate(BaseModel):
    goal: int


def _iso(value):
    return value.isoformat() if value else None


def entry_to_dict(entry: Optional[ShelfEntry]):
    if entry is None:
        return None
    return {
        "id": entry.id,
        "bookId": entry.book_id,
        "status": entry.status.value,
        "currentPage": entry.current_page,
        "pageCount": entry.page_count,
        "rating": entry.rating,
        "startedAt": _iso(entry.started_date),
        "finishedAt": _iso(entry.finished_date),
        "updatedAt": _iso(entry.updated_at),
    }


def shelf_book_to_dict(item: ShelfBook) -> dict:
    data = entry_to_dict(item.entry)
    data.update(
        {
            "bookTitle": item.book.title,
            "bookCoverUrl": item.book.cover_url,
            "bookPageCount": item.book.page_count,
            "bookDatePublished": item.book.date_published,
            "bookAuthors": ", ".join(item.book.authors) or None,
        }
    )
    return data


def counts_to_dict(counts: ShelfCounts) -> dict:
    return {
        "wantToRead": counts.want_to_read,
        "currentlyReading": counts.currently_reading,
        "read": counts.read,
        "dnf": counts.dnf,
    }


def goal_to_dict(goal: Optional[ReadingGoal]):
    if goal is None:
        return None
    return {"goal": goal.goal, "booksRead": goal.books_read, "year": goal.year}


def pace_to_dict(pace: GoalPace) -> dict:
    return {
        "goal": pace.goal,
        "booksRead": pace.books_read,
        "progressPercent": pace.progress_percent,
        "daysElapsed": pace.days_elapsed,
        "daysRemaining": pace.days_remaining,
        "expectedBooks": pace.expected_books,
        "aheadOfPace": pace.ahead_of_pace,
        "paceDelta": pace.pace_delta,
        "booksRemaining": pace.books_remaining,
        "requiredPacePerDay": f"{pace.required_pace_per_day:.2f}",
        "goalReached": pace.goal_reached,
        "booksOverGoal": pace.books_over_goal,
    }


def calendar_to_dict(calendar: ReadingCalendar) -> dict:
    return {
        "year": calendar.year,
        "month": calendar.month,
        "booksByDay": {
            day: [
                {
                    "id": b.entry_id,
                    "bookId": b.book_id,
                    "title": b.title,
                    "coverUrl": b.cover_url,
                    "pageCount": b.page_count,
                    "rating": b.rating,
                }
                for b in books
            ]
            for day, books in calendar.books_by_day.items()
        },
        "totalBooks": calendar.total_books,
    }


def _highlight(value: Optional[BookHighlight]):
    if value is None:
        return None
    return {k: v for k, v in asdict(value).items() if v is not None}


def stats_to_dict(stats: ReadingStats) -> dict:
    return {
        "booksReadThisYear": stats.books_read_this_year,
        "pagesReadThisYear": stats.pages_read_this_year,
        "currentlyReading": stats.currently_reading,
        "avgPagesPerDay": stats.avg_pages_per_day,
        "readingStreak": stats.reading_streak,
        "booksThisMonth": stats.books_this_month,
        "longestBookRead": _highlight(stats.longest_book_read),
        "favoriteGenre": stats.favorite_genre,
        "uniqueAuthorsRead": stats.unique_authors_read,
        "avgBookLength": stats.avg_book_length,
        "avgDaysToFinish": stats.avg_days_to_finish,
        "fastestRead": _highlight(stats.fastest_read),
    }
