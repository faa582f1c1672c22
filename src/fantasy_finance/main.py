"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fantasy_finance import __version__
from fantasy_finance.app_context import AppContext
from fantasy_finance.config.settings import get_settings
from fantasy_finance.config.logging_config import setup_logging
from fantasy_finance.api.routers import (
    transactions_router,
    activities_router,
    holdings_router,
    market_router,
)
from fantasy_finance.core.exceptions import AppError, StoreError

logger = logging.getLogger(__name__)


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the FastAPI app around an AppContext (created at startup if not given)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        # Startup
        setup_logging()
        ctx = context or AppContext()
        app.state.context = ctx
        await ctx.startup()
        yield
        # Shutdown: let the in-flight refresh tick finish its file writes
        await ctx.shutdown()

    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Ledger-derived stock holdings with background market data refresh",
        version=__version__,
        lifespan=lifespan,
    )

    # Include routers
    app.include_router(transactions_router)
    app.include_router(activities_router)
    app.include_router(holdings_router)
    app.include_router(market_router)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Global handler for application errors."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": exc.message},
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        """Unreadable or unwritable data file outside a ledger write."""
        logger.error("Storage error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"error": "STORAGE_ERROR", "message": str(exc)},
        )

    @app.get("/health")
    def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/")
    def root() -> dict[str, str]:
        """Root endpoint with API info."""
        return {
            "app": settings.app_name,
            "version": __version__,
            "docs": "/docs",
        }

    return app


app = create_app()
