import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from oneshare.app.api.shares import router as shares_router
from oneshare.app.bootstrap import open_store
from oneshare.app.core.config import Settings, settings as default_settings
from oneshare.app.core.logging import get_logger, setup_logging
from oneshare.app.db.store import ShareStore
from oneshare.app.exceptions import QuotaDeniedError, ShareException, StorageError
from oneshare.app.services.lifecycle import MessageLifecycle
from oneshare.app.services.sweeper import PeriodicSweeper


def create_app(
    store: ShareStore | None = None,
    app_settings: Settings | None = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Already opened store to serve from. When omitted the store is
            opened (and migrated) on startup and closed on shutdown.
        app_settings: Settings to use instead of the environment ones
        clock: Source of the current unix time

    Returns:
        Configured FastAPI application instance
    """
    cfg = app_settings or default_settings
    setup_logging()
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Open the store and run the expired message sweeper while serving."""
        owns_store = app.state.store is None
        if owns_store:
            # A MigrationChainError propagates and aborts startup
            app.state.store = open_store(cfg)

        sweeper = PeriodicSweeper(
            MessageLifecycle(app.state.store),
            interval=cfg.sweep_interval_seconds,
            clock=clock,
        )
        sweeper.start()
        logger.info("Application startup complete")

        yield

        sweeper.stop()
        if owns_store:
            app.state.store.disconnect()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="oneshare",
        description="One-time share links with per-user quotas",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.settings = cfg
    app.state.clock = clock

    app.include_router(shares_router)

    @app.get("/health")
    def health() -> dict[str, Any]:
        """Report whether the store is reachable."""
        current: ShareStore | None = app.state.store
        if current is None or not current.is_connection_opened():
            return {"status": "degraded", "components": {"database": {"status": "closed"}}}
        try:
            pending = current.count_messages()
        except StorageError as e:
            return {
                "status": "degraded",
                "components": {"database": {"status": "error", "error": str(e)[:100]}},
            }
        return {
            "status": "ok",
            "components": {"database": {"status": "ok", "messages": pending}},
        }

    @app.exception_handler(QuotaDeniedError)
    async def quota_denied_handler(request: Request, exc: QuotaDeniedError) -> JSONResponse:
        """Render quota denials with the reason and remaining cooldown."""
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(ShareException)
    async def share_exception_handler(request: Request, exc: ShareException) -> JSONResponse:
        logger.error(f"Request failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": type(exc).__name__, "message": "Can't process the request. Try again"},
        )

    return app


app = create_app()
