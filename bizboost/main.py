from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bizboost.core.config import Settings, settings
from bizboost.core.errors import (
    ChallengeFailed,
    DirectoryError,
    ForeignKeyViolation,
    InvalidComment,
    InvalidDeal,
    InvalidQuery,
    InvalidRating,
    InvalidUpdate,
    NotFound,
    StorageIOError,
)
from bizboost.core.logging_config import configure_logging, parse_module_levels
from bizboost.routers import businesses, captcha, deals, favorites, reviews, users
from bizboost.services.directory import Directory

configure_logging(
    log_dir=settings.log_dir,
    level=settings.log_level,
    module_levels=parse_module_levels(settings.log_levels),
)
logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[DirectoryError], int] = {
    NotFound: 404,
    ForeignKeyViolation: 409,
    InvalidRating: 422,
    InvalidComment: 422,
    InvalidDeal: 422,
    InvalidUpdate: 422,
    InvalidQuery: 422,
    ChallengeFailed: 403,
    StorageIOError: 503,
}


def status_for(exc: DirectoryError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 400


def create_app(app_settings: Settings | None = None) -> FastAPI:
    cfg = app_settings or settings
    app = FastAPI(title="Byte-Sized Business Boost", version="0.1.0")

    # The desktop webview loads from a custom scheme.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def on_startup() -> None:
        app.state.directory = Directory.open(cfg)
        logger.info("Directory service started")

    @app.on_event("shutdown")
    def on_shutdown() -> None:
        directory = getattr(app.state, "directory", None)
        if directory is not None:
            directory.close()

    @app.exception_handler(DirectoryError)
    async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
        status_code = status_for(exc)
        if isinstance(exc, StorageIOError):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
        headers = {"Retry-After": "1"} if exc.retryable else None
        return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()}, headers=headers)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error")
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})
        duration_ms = int((time.time() - start) * 1000)
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration_ms)
        return response

    app.include_router(users.router)
    app.include_router(businesses.router)
    app.include_router(reviews.router)
    app.include_router(deals.router)
    app.include_router(favorites.router)
    app.include_router(captcha.router)

    return app


app = create_app()
