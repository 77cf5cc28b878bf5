from __future__ import annotations

import json
from typing import Iterable

import pandas as pd

from .listing import authors_label
from .models import ShelfBook

CSV_HEADERS = ["Title", "Author", "Pages", "Rating", "Status", "Current Page", "Date Published"]


def export_csv(books: Iterable[ShelfBook]) -> str:
    # None would turn integer columns into float64
    rows = [
        [
            item.book.title,
            authors_label(item),
            item.book.page_count if item.book.page_count is not None else "",
            item.entry.rating if item.entry.rating is not None else "",
            item.entry.status.value,
            item.entry.current_page,
            item.book.date_published or "",
        ]
        for item in books
    ]
    return pd.DataFrame(rows, columns=CSV_HEADERS).to_csv(index=False, lineterminator="\n")


def export_json(books: Iterable[ShelfBook]) -> str:
    rows = [
        {
            "title": item.book.title,
            "author": authors_label(item) or None,
            "pages": item.book.page_count,
            "rating": item.entry.rating,
            "status": item.entry.status.value,
            "currentPage": item.entry.current_page,
            "datePublished": item.book.date_published,
            "startedAt": item.entry.started_date.isoformat() if item.entry.started_date else None,
            "finishedAt": item.entry.finished_date.isoformat() if item.entry.finished_date else None,
        }
        for item in books
    ]
    return json.dumps(rows, ensure_ascii=False, indent=2)
