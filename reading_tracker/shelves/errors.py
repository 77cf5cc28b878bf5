"""
Shelf domain errors.

Every error carries a stable ``code`` and the HTTP status the API maps it to.
Validation errors are raised before any store write.
"""

from __future__ import annotations


class ShelfError(Exception):
    code = "shelf_error"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidProgress(ShelfError):
    code = "invalid_progress"
    http_status = 400


class ProgressExceedsPageCount(ShelfError):
    code = "progress_exceeds_page_count"
    http_status = 400

    def __init__(self, requested_page: int, page_count: int):
        super().__init__(f"Page number cannot exceed {page_count} (got {requested_page})")
        self.requested_page = requested_page
        self.page_count = page_count


class InvalidGoal(ShelfError):
    code = "invalid_goal"
    http_status = 400


class InvalidRating(ShelfError):
    code = "invalid_rating"
    http_status = 400


class InvalidQuery(ShelfError):
    code = "invalid_query"
    http_status = 400


class NotFound(ShelfError):
    code = "not_found"
    http_status = 404


class StoreConflict(ShelfError):
    code = "store_conflict"
    http_status = 503
