from __future__ import annotations

from fastapi import APIRouter

from shamba_gate.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check used by load balancers and monitoring.

    Returns:
        dict: ``status`` set to "ok" and whether rate limits are enforced.
    """

    return {"status": "ok", "rate_limit_enabled": settings.app.rate_limit_enabled}
