"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return consistent JSON responses with proper
HTTP status codes and traceability.

Design:
- AppError subclasses → mapped HTTP status (400, 404, 429)
- Request parsing failures → 400
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import AppError, NotFoundAppError, RateLimitedAppError
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def status_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status code.

    - NotFoundAppError → 404 Not Found
    - RateLimitedAppError → 429 Too Many Requests
    - anything else (ValidationAppError included) → 400 Bad Request
    """
    if isinstance(exc, NotFoundAppError):
        return 404
    if isinstance(exc, RateLimitedAppError):
        return 429
    return 400


def _error_body(code: str, message: str, details: object | None = None) -> dict:
    content: dict = {
        "code": code,
        "message": message,
        "request_id": get_request_id(),
    }
    if details:
        content["details"] = details
    return {"error": content}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    All responses include:
    - error.code: Machine-readable error code
    - error.message: Human-readable message
    - error.request_id: For distributed tracing
    - error.details: Optional structured context

    Rate-limit rejections also carry X-RateLimit-* headers when enabled.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    headers: dict[str, str] = {}
    if (
        isinstance(exc, RateLimitedAppError)
        and settings.app.rate_limit_include_headers
        and exc.details
    ):
        headers["X-RateLimit-Limit"] = str(exc.details.get("limit", ""))
        headers["X-RateLimit-Remaining"] = str(exc.details.get("remaining", 0))

    return JSONResponse(
        status_code=status_code,
        content=_error_body(exc.code, exc.message, exc.details),
        headers=headers or None,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Map unparseable path parameters or bodies to 400 Bad Request."""
    locations = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
    logger.info(
        "request_validation_failed",
        extra={
            "request_path": request.url.path,
            "locations": locations,
        },
    )
    return JSONResponse(
        status_code=400,
        content=_error_body(
            "invalid_request",
            "Request could not be parsed.",
            {"fields": locations},
        ),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces reach the client.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.

    Example:
        >>> from fastapi import FastAPI
        >>> from app.core.exception_handlers import setup_exception_handlers
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
