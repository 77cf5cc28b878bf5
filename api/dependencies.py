from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import Header, HTTPException

from reading_tracker.shelves import (
    Catalog,
    NoopViewCache,
    ReadViewCache,
    ShelfRepository,
    ShelfService,
    SqlAlchemyCatalog,
    SqlAlchemyShelfRepository,
    zone_today,
)

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./data/reading_tracker.db"


def database_url() -> str:
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


@lru_cache(maxsize=1)
def get_repo() -> ShelfRepository:
    return SqlAlchemyShelfRepository(database_url())


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    return SqlAlchemyCatalog(database_url())


@lru_cache(maxsize=1)
def get_view_cache() -> ReadViewCache:
    # "none" for multi-process deployments where an in-process cache would go stale
    if os.getenv("VIEW_CACHE", "memory").lower() == "none":
        return NoopViewCache()
    return ReadViewCache()


@lru_cache(maxsize=1)
def get_service() -> ShelfService:
    tz_name = os.getenv("READING_TRACKER_TZ", "UTC")
    return ShelfService(
        repository=get_repo(),
        catalog=get_catalog(),
        today=zone_today(tz_name),
        view_cache=get_view_cache(),
        zone=ZoneInfo(tz_name),
    )


def get_current_user(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="User not authenticated")
    return x_user_id.strip()
