from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reading_tracker.shelves import ShelfError

from api.routes.goals import router as goals_router
from api.routes.shelves import router as shelves_router
from api.routes.stats import router as stats_router

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="Reading Tracker API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(shelves_router)
    app.include_router(goals_router)
    app.include_router(stats_router)

    @app.exception_handler(ShelfError)
    async def shelf_error_handler(request: Request, exc: ShelfError):
        logger.warning("%s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content={"detail": exc.message, "code": exc.code})

    @app.get("/healthz")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
