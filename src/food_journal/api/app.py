"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from food_journal.api.bundles import router as bundles_router
from food_journal.api.items import router as items_router
from food_journal.api.journal import router as journal_router
from food_journal.app_logging import configure_logging
from food_journal.containers import AppContainer
from food_journal.domain.errors import (
    CyclicCompositionError,
    DayLogFinalizedError,
    FoodJournalError,
    InvalidBundleFormatError,
    InvalidResolutionError,
    ItemNotFoundError,
    UnsupportedBundleVersionError,
)

_ERROR_STATUS: dict[type[FoodJournalError], int] = {
    InvalidBundleFormatError: status.HTTP_400_BAD_REQUEST,
    UnsupportedBundleVersionError: status.HTTP_400_BAD_REQUEST,
    ItemNotFoundError: status.HTTP_404_NOT_FOUND,
    CyclicCompositionError: status.HTTP_409_CONFLICT,
    DayLogFinalizedError: status.HTTP_409_CONFLICT,
    InvalidResolutionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            app.state.container.catalog.refresh()
        except Exception:
            logger.exception("Failed to preload item catalog")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(items_router)
    app.include_router(bundles_router)
    app.include_router(journal_router)

    @app.exception_handler(FoodJournalError)
    async def domain_error(request: Request, exc: FoodJournalError) -> JSONResponse:
        status_code = error_status(exc)
        logger.info(
            "%s %s -> %s: %s", request.method, request.url.path, status_code, exc
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def error_status(exc: FoodJournalError) -> int:
    """Return the HTTP status for a domain error."""
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST
