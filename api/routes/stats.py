from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from reading_tracker.shelves import ShelfService

from api.dependencies import get_current_user, get_service
from api.schemas import shelf_book_to_dict, stats_to_dict

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("")
def get_stats(user_id: str = Depends(get_current_user), service: ShelfService = Depends(get_service)):
    return stats_to_dict(service.get_stats(user_id))


@router.get("/currently-reading")
def get_currently_reading(
    limit: int = Query(6, ge=1, le=20),
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    return [
        {**shelf_book_to_dict(book), "progress": percent}
        for book, percent in service.get_currently_reading(user_id, limit)
    ]
