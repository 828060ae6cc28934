"""Application factory for the FastAPI app.

Centralizes app construction (metadata, lifespan, middleware, handlers,
routers) so tests can build isolated apps with their own rate limit store.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from shamba_gate.adapters.rate_limit.in_memory import InMemoryRateLimitStore
from shamba_gate.api.routes import health_router, limits_router
from shamba_gate.core.config import settings
from shamba_gate.core.exception_handlers import setup_exception_handlers
from shamba_gate.core.logging import configure_logging
from shamba_gate.core.middleware import (
    cors_middleware,
    rate_limit_headers_middleware,
    request_id_middleware,
)
from shamba_gate.core.openapi import TAGS_METADATA, apply_openapi_customizations

logger = logging.getLogger(__name__)


def create_app(store: InMemoryRateLimitStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        store: Rate limit store to use; a fresh in-memory store is created
            when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    rate_limit_store = store if store is not None else InMemoryRateLimitStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.rate_limit_store = rate_limit_store
        rate_limit_store.start_sweeper(settings.app.rate_limit_sweep_interval_seconds)
        logger.info(
            "app.startup",
            extra={
                "app_env": settings.app_env,
                "rate_limit_enabled": settings.app.rate_limit_enabled,
            },
        )
        try:
            yield
        finally:
            await rate_limit_store.stop_sweeper()
            logger.info("app.shutdown")

    app = FastAPI(
        title="Shamba Gate",
        description=(
            "Rate limiting gate for the shambaXchange serverless endpoints. "
            "Tracks per-user or per-address request budgets (AUTH, AI, API, "
            "EXPENSIVE) and answers admission checks, returning a standard "
            "429 response with Retry-After when a caller is over budget."
        ),
        version="0.1.0",
        openapi_tags=TAGS_METADATA,
        lifespan=lifespan,
    )
    # Available before startup too, for apps driven without a lifespan
    app.state.rate_limit_store = rate_limit_store

    # Middleware (last registered runs first)
    app.middleware("http")(rate_limit_headers_middleware)
    app.middleware("http")(cors_middleware)
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(limits_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
