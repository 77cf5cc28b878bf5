"""
Shelves subsystem exports.
"""

from .calendar import build_calendar
from .catalog import Catalog, InMemoryCatalog, SqlAlchemyCatalog
from .errors import (
    InvalidGoal,
    InvalidProgress,
    InvalidQuery,
    InvalidRating,
    NotFound,
    ProgressExceedsPageCount,
    ShelfError,
    StoreConflict,
)
from .export import export_csv, export_json
from .goals import compute_goal_pace, compute_pace_from_elapsed, validate_goal
from .invalidation import NoopViewCache, ReadView, ReadViewCache
from .listing import ShelfSort, filter_shelf_books, sort_shelf_books, year_options
from .models import (
    BookHighlight,
    BookSummary,
    CalendarBook,
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
from .progress import progress_percent, set_progress
from .repository import InMemoryShelfRepository, ShelfRepository, SqlAlchemyShelfRepository
from .service import ShelfService, zone_today
from .stats import compute_stats, count_by_status
from .status_machine import transition

__all__ = [
    "BookHighlight",
    "BookSummary",
    "CalendarBook",
    "Catalog",
    "GoalPace",
    "InMemoryCatalog",
    "InMemoryShelfRepository",
    "InvalidGoal",
    "InvalidProgress",
    "InvalidQuery",
    "InvalidRating",
    "NoopViewCache",
    "NotFound",
    "ProgressExceedsPageCount",
    "ReadView",
    "ReadViewCache",
    "ReadingCalendar",
    "ReadingGoal",
    "ReadingStats",
    "ShelfBook",
    "ShelfCounts",
    "ShelfEntry",
    "ShelfError",
    "ShelfRepository",
    "ShelfService",
    "ShelfSort",
    "ShelfStatus",
    "SqlAlchemyCatalog",
    "SqlAlchemyShelfRepository",
    "StoreConflict",
    "build_calendar",
    "compute_goal_pace",
    "compute_pace_from_elapsed",
    "compute_stats",
    "count_by_status",
    "export_csv",
    "export_json",
    "filter_shelf_books",
    "parse_status",
    "progress_percent",
    "set_progress",
    "sort_shelf_books",
    "transition",
    "validate_goal",
    "year_options",
    "zone_today",
]
