from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional, Tuple

from .errors import InvalidProgress, ProgressExceedsPageCount
from .models import ShelfEntry


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def progress_percent(current_page: int, page_count: Optional[int]) -> int:
    if not page_count or page_count <= 0:
        return 0
    return round_half_up(current_page / page_count * 100)


def validate_page(requested_page, page_count: Optional[int]) -> int:
    # bool is an int subclass; True is not a page number.
    if isinstance(requested_page, bool) or not isinstance(requested_page, int):
        raise InvalidProgress(f"Page must be a non-negative integer, got {requested_page!r}")
    if requested_page < 0:
        raise InvalidProgress(f"Page must be a non-negative integer, got {requested_page}")
    if page_count is not None and requested_page > page_count:
        raise ProgressExceedsPageCount(requested_page, page_count)
    return requested_page


def set_progress(entry: ShelfEntry, requested_page) -> Tuple[int, int]:
    """
    Validate a requested page against the entry's page count.

    Returns the page unchanged together with its completion percent. The entry
    is not modified.
    """
    page = validate_page(requested_page, entry.page_count)
    return page, progress_percent(page, entry.page_count)


def apply_progress(entry: ShelfEntry, requested_page) -> ShelfEntry:
    page, _ = set_progress(entry, requested_page)
    return replace(entry, current_page=page)
