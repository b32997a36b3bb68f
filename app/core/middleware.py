"""HTTP middleware: request correlation, security headers, and body limits.

- request_id_middleware accepts an incoming X-Request-ID header or generates
  a UUID, stores it in contextvars for log correlation, and echoes it with
  the total request duration on the response.
- security_headers_middleware adds conservative browser hardening headers
  to every response.
- request_size_limit_middleware rejects requests whose declared
  Content-Length exceeds the configured maximum before the body is read.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging import clear_request_id, get_request_id, set_request_id

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


async def request_id_middleware(request: Request, call_next) -> Response:
    """Propagate a correlation id through the request lifecycle.

    If the client provides the configured request id header, that value is
    used; otherwise a new UUID is generated. The id is cleared from context
    once the response is produced.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with the request id and
            X-Request-Duration-ms headers added.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    duration_ms = (time.perf_counter() - start) * 1000
    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response


async def security_headers_middleware(request: Request, call_next) -> Response:
    """Set hardening headers the handler did not set itself."""

    response: Response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def request_size_limit_middleware(request: Request, call_next) -> Response:
    """Reject bodies whose declared size exceeds ``max_request_size_mb``.

    Returns:
        Response: 413 with the standard error body, or the downstream response.
    """

    max_bytes = settings.app.max_request_size_mb * 1024 * 1024
    declared = request.headers.get("content-length")

    if declared is not None and declared.isdigit() and int(declared) > max_bytes:
        logger.warning(
            "request_size.rejected",
            extra={"content_length": int(declared), "max_bytes": max_bytes},
        )
        return JSONResponse(
            status_code=413,
            content={
                "error": {
                    "code": "request_too_large",
                    "message": (
                        f"Request body too large. Maximum size: "
                        f"{settings.app.max_request_size_mb}MB"
                    ),
                    "request_id": get_request_id(),
                }
            },
        )

    return await call_next(request)
