"""
Which read views each write can change, and a per-user cache keyed on them.

    status change   -> counts, shelf books, stats, calendar, goal, currently reading
    progress change -> stats, shelf books, currently reading
    rating change   -> shelf books, calendar, stats (activity streak)
    goal change     -> goal
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Hashable, Iterable, Tuple


class ReadView(str, Enum):
    SHELF_COUNTS = "shelf_counts"
    SHELF_BOOKS = "shelf_books"
    STATS = "stats"
    CALENDAR = "calendar"
    GOAL = "goal"
    CURRENTLY_READING = "currently_reading"


STATUS_CHANGE_VIEWS: FrozenSet[ReadView] = frozenset(ReadView)
PROGRESS_CHANGE_VIEWS: FrozenSet[ReadView] = frozenset(
    {ReadView.STATS, ReadView.SHELF_BOOKS, ReadView.CURRENTLY_READING}
)
RATING_CHANGE_VIEWS: FrozenSet[ReadView] = frozenset({ReadView.SHELF_BOOKS, ReadView.CALENDAR, ReadView.STATS})
GOAL_CHANGE_VIEWS: FrozenSet[ReadView] = frozenset({ReadView.GOAL})


class ReadViewCache:
    """
    In-process cache of computed read views per user. Writers call
    ``invalidate`` with the views their write can affect; nothing else is
    dropped.

    Views are computed outside the lock. Each ``invalidate`` bumps the user's
    generation, and a value computed across a bump is returned to its caller
    but not stored.
    """

    def __init__(self):
        self._items: Dict[Tuple[str, ReadView, Hashable], Any] = {}
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get_or_compute(self, user_id: str, view: ReadView, key: Hashable, compute: Callable[[], Any]) -> Any:
        cache_key = (user_id, view, key)
        with self._lock:
            if cache_key in self._items:
                return self._items[cache_key]
            generation = self._generations.get(user_id, 0)
        value = compute()
        with self._lock:
            if self._generations.get(user_id, 0) == generation:
                self._items[cache_key] = value
        return value

    def invalidate(self, user_id: str, views: Iterable[ReadView]) -> None:
        targets = set(views)
        with self._lock:
            self._generations[user_id] = self._generations.get(user_id, 0) + 1
            for cache_key in [k for k in self._items if k[0] == user_id and k[1] in targets]:
                del self._items[cache_key]

    def cached_views(self, user_id: str) -> FrozenSet[ReadView]:
        with self._lock:
            return frozenset(k[1] for k in self._items if k[0] == user_id)


class NoopViewCache(ReadViewCache):
    """Computes every view on demand."""

    def get_or_compute(self, user_id: str, view: ReadView, key: Hashable, compute: Callable[[], Any]) -> Any:
        return compute()
