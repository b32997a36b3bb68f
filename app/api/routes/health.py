from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems to determine liveness.
    Not subject to rate limiting.

    Returns:
        dict: ``{"status": "OK", "timestamp": <ISO-8601 UTC>}``.
    """

    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}
