"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) and
owns the lifecycle of the domain state: the user store and the rate limiter
are built here, attached to ``app.state``, and live exactly as long as the
app instance.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.storage.base import AbstractUserStore
from app.adapters.storage.in_memory import InMemoryUserStore
from app.api.routes import health_router, users_router
from app.core.config import parse_csv, settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import (
    request_id_middleware,
    request_size_limit_middleware,
    security_headers_middleware,
)
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import build_rate_limiter
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "app.startup",
        extra={
            "app_env": settings.app_env,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
        },
    )
    yield
    logger.info("app.shutdown", extra={"users": app.state.user_service.store.count()})


def create_app(
    *,
    store: AbstractUserStore | None = None,
    rate_limiter: AbstractRateLimiter | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        store: User store to serve; a fresh in-memory store when omitted.
        rate_limiter: Admission controller; built from settings when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="User Resource API",
        description=(
            "In-memory user records with store-assigned identity and "
            "timestamps, input shape validation, and per-client sliding-window "
            "rate limiting."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    app.state.user_service = UserService(store or InMemoryUserStore())
    app.state.rate_limiter = rate_limiter or build_rate_limiter(settings.app)

    # Middleware: the last one registered runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_csv(settings.app.cors_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[settings.log.request_id_header],
    )
    app.middleware("http")(request_size_limit_middleware)
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(users_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
