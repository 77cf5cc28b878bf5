from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse

from reading_tracker.shelves import ShelfService, ShelfSort, ShelfStatus

from api.dependencies import get_current_user, get_service
from api.schemas import (
    ProgressUpdate,
    RatingUpdate,
    StatusUpdate,
    StatusValue,
    counts_to_dict,
    entry_to_dict,
    shelf_book_to_dict,
)

router = APIRouter(prefix="/shelf", tags=["shelf"])


@router.get("")
def get_shelves(user_id: str = Depends(get_current_user), service: ShelfService = Depends(get_service)):
    shelves = service.get_shelves(user_id)
    keys = {
        ShelfStatus.WANT_TO_READ: "wantToRead",
        ShelfStatus.CURRENTLY_READING: "currentlyReading",
        ShelfStatus.READ: "read",
        ShelfStatus.DNF: "dnf",
    }
    return {keys[status]: [shelf_book_to_dict(b) for b in books] for status, books in shelves.items()}


@router.get("/counts")
def get_shelf_counts(user_id: str = Depends(get_current_user), service: ShelfService = Depends(get_service)):
    return counts_to_dict(service.get_shelf_counts(user_id))


@router.get("/books")
def get_shelf_books(
    status: StatusValue,
    sort: ShelfSort = ShelfSort.DATE_ADDED,
    search: Optional[str] = None,
    min_rating: Optional[int] = Query(None, ge=1, le=5),
    year: Optional[int] = None,
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    books = service.get_shelf_books(
        user_id, status, sort=sort, search=search, min_rating=min_rating, finished_year=year
    )
    return [shelf_book_to_dict(b) for b in books]


@router.get("/years")
def get_finish_years(user_id: str = Depends(get_current_user), service: ShelfService = Depends(get_service)):
    return service.get_finish_years(user_id)


@router.get("/statuses")
def get_status_for_books(
    book_ids: List[int] = Query(default=[]),
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    statuses = service.get_status_for_books(user_id, book_ids)
    return {
        str(book_id): {"status": info["status"].value, "currentPage": info["current_page"]}
        for book_id, info in statuses.items()
    }


@router.get("/export")
def export_shelf(
    status: StatusValue,
    format: Literal["csv", "json"] = "csv",
    book_ids: Optional[List[int]] = Query(None),
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    content = service.export_shelf(user_id, status, format, book_ids)
    media_type = "text/csv" if format == "csv" else "application/json"
    filename = f"{status}-shelf-export.{format}"
    return PlainTextResponse(
        content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/entries/{book_id}")
def get_entry(book_id: int, user_id: str = Depends(get_current_user), service: ShelfService = Depends(get_service)):
    entry = service.get_entry(user_id, book_id)
    if not entry:
        raise HTTPException(status_code=404, detail=f"Book {book_id} is not on your shelves")
    return entry_to_dict(entry)


@router.put("/entries/{book_id}/status")
def update_status(
    book_id: int,
    body: StatusUpdate,
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    entry = service.update_status(user_id, book_id, body.status, body.current_page)
    return entry_to_dict(entry)


@router.put("/entries/{book_id}/progress")
def update_progress(
    book_id: int,
    body: ProgressUpdate,
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    return entry_to_dict(service.update_progress(user_id, book_id, body.current_page))


@router.put("/entries/{book_id}/rating")
def update_rating(
    book_id: int,
    body: RatingUpdate,
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    return entry_to_dict(service.update_rating(user_id, book_id, body.rating))


@router.delete("/entries/{book_id}")
def remove_from_shelf(
    book_id: int,
    user_id: str = Depends(get_current_user),
    service: ShelfService = Depends(get_service),
):
    service.remove_from_shelf(user_id, book_id)
    return {"success": True, "bookId": book_id}
