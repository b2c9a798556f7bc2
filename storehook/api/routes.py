"""FastAPI application for the storehook service.

This module provides:
- Webhook history endpoints integration
- SQLite storage wiring for the global orchestrator
- Health check endpoint
- Error handling
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storehook.webhooks.orchestrator import (
    WebhookOrchestrator,
    set_webhook_orchestrator,
    webhook_orchestrator_is_set,
)
from storehook.webhooks.sqlite_store import SQLiteHistoryStore, SQLiteHookRepository

logger = structlog.get_logger(__name__)


class ErrorResponse(BaseModel):
    """Error payload returned by all endpoints."""

    error: str
    detail: str | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    """Application lifespan handler.

    Installs an orchestrator over SQLite stores at WEBHOOK_DB_PATH unless
    one was set before startup, and closes those stores on shutdown.
    """
    # Startup
    logger.info("application_starting")

    stores: list[SQLiteHookRepository | SQLiteHistoryStore] = []
    if not webhook_orchestrator_is_set():
        repository = SQLiteHookRepository()
        history = SQLiteHistoryStore()
        await repository.initialize()
        await history.initialize()
        stores = [repository, history]
        set_webhook_orchestrator(WebhookOrchestrator(repository, history))

    yield

    # Shutdown
    if stores:
        set_webhook_orchestrator(None)
        for store in stores:
            await store.close()
    logger.info("application_shutting_down")


OPENAPI_TAGS = [
    {
        "name": "Webhooks",
        "description": "Webhook delivery history and replay.",
    },
    {
        "name": "Health",
        "description": "Liveness check.",
    },
]


def create_app(
    title: str = "storehook",
    version: str = "1.0.0",
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        title: API title.
        version: API version.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title=title,
        version=version,
        description="Outbound webhook dispatch for store events.",
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException  # noqa: ARG001
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=exc.detail if isinstance(exc.detail, str) else str(exc.detail),
                detail=None,
            ).model_dump(),
        )

    register_routes(app)

    return app


def register_routes(app: FastAPI) -> None:
    """Register all routes on the application.

    Args:
        app: FastAPI application.
    """
    from storehook.api.webhooks import router as webhooks_router

    app.include_router(webhooks_router)

    @app.get("/health", tags=["Health"])
    async def health() -> dict[str, Any]:
        """Basic liveness check."""
        return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}


app = create_app()
