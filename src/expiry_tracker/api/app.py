"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from expiry_tracker.api.foods import router as foods_router
from expiry_tracker.app_logging import configure_logging
from expiry_tracker.config import parse_cors_origins
from expiry_tracker.containers import AppContainer
from expiry_tracker.errors import ExpiryTrackerError, StorageError

LIVENESS_MESSAGE = "Food expiry tracker is running"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        try:
            await run_in_threadpool(state_container.ping_storage)
        except Exception:
            logger.exception("Failed to connect to MongoDB")
            await state_container.close_resources()
            raise
        logger.info("Pinged your deployment. Connected to MongoDB")
        yield
        await state_container.close_resources()

    app = FastAPI(title="Food Expiry Tracker", lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(container.settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(foods_router)

    @app.exception_handler(ExpiryTrackerError)
    async def handle_app_error(
        request: Request, exc: ExpiryTrackerError
    ) -> JSONResponse:
        if isinstance(exc, StorageError):
            return JSONResponse(
                status_code=exc.status_code, content={"error": exc.message}
            )
        logger.warning(
            "Rejected %s %s: %s", request.method, request.url.path, exc.message
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error_code, "message": exc.message},
        )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Liveness endpoint."""
        return LIVENESS_MESSAGE

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
