from __future__ import annotations

from datetime import date
from typing import Iterable

from .errors import InvalidGoal
from .models import GoalPace, ShelfEntry, ShelfStatus
from .progress import round_half_up

MIN_GOAL = 1
MAX_GOAL = 365

# Leap days are not modeled: the pace always assumes a 365-day year.
DAYS_IN_YEAR = 365


def validate_goal(goal) -> int:
    if isinstance(goal, bool) or not isinstance(goal, int) or not MIN_GOAL <= goal <= MAX_GOAL:
        raise InvalidGoal(f"Reading goal must be an integer between {MIN_GOAL} and {MAX_GOAL}, got {goal!r}")
    return goal


def count_books_read(entries: Iterable[ShelfEntry], year: int) -> int:
    return sum(
        1
        for e in entries
        if e.status == ShelfStatus.READ and e.finished_date is not None and e.finished_date.year == year
    )


def days_elapsed_in_year(year: int, today: date, days_in_year: int = DAYS_IN_YEAR) -> int:
    """Days from Jan 1 through today, inclusive, clamped to [0, days_in_year]."""
    elapsed = (today - date(year, 1, 1)).days + 1
    return max(0, min(days_in_year, elapsed))


def compute_pace_from_elapsed(
    goal: int,
    books_read: int,
    days_elapsed: int,
    days_in_year: int = DAYS_IN_YEAR,
) -> GoalPace:
    days_elapsed = max(0, min(days_in_year, days_elapsed))
    days_remaining = days_in_year - days_elapsed
    has_goal = goal > 0

    progress = round_half_up(books_read / goal * 100) if has_goal else 0
    expected = round_half_up(days_elapsed / days_in_year * goal) if has_goal else 0
    remaining = max(0, goal - books_read)
    if remaining > 0 and days_remaining > 0:
        required = round(remaining / days_remaining, 2)
    else:
        required = 0.0

    return GoalPace(
        goal=goal,
        books_read=books_read,
        progress_percent=progress,
        days_elapsed=days_elapsed,
        days_remaining=days_remaining,
        expected_books=expected,
        ahead_of_pace=books_read >= expected,
        pace_delta=abs(books_read - expected),
        books_remaining=remaining,
        required_pace_per_day=required,
        goal_reached=has_goal and books_read >= goal,
        books_over_goal=max(0, books_read - goal) if has_goal else 0,
    )


def compute_goal_pace(goal: int, books_read: int, year: int, today: date) -> GoalPace:
    return compute_pace_from_elapsed(goal, books_read, days_elapsed_in_year(year, today))
