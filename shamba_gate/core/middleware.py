"""HTTP middleware: request correlation, CORS and quota headers.

Usage:
    app.middleware("http")(rate_limit_headers_middleware)
    app.middleware("http")(cors_middleware)
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response

from shamba_gate.adapters.rate_limit.base import RateLimitDecision
from shamba_gate.core.config import settings
from shamba_gate.core.logging import clear_request_id, set_request_id
from shamba_gate.core.responses import CORS_HEADERS, rate_limit_headers


async def request_id_middleware(request: Request, call_next) -> Response:
    """Propagate a correlation id through logs and back to the client.

    Uses the incoming ``X-Request-ID`` header (name configurable via
    ``LOG_REQUEST_ID_HEADER``) or generates a UUID, keeps it in a contextvar
    for the duration of the request and echoes it on the response together
    with ``X-Request-Duration-ms``.
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


async def cors_middleware(request: Request, call_next) -> Response:
    """Answer browser preflight requests and allow any origin.

    Browser-originated calls send an ``OPTIONS`` preflight first; it is
    answered here without reaching routes or rate limits.
    """

    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    response: Response = await call_next(request)
    for name, value in CORS_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def rate_limit_headers_middleware(request: Request, call_next) -> Response:
    """Report remaining quota on responses of admitted, rate limited requests."""

    response: Response = await call_next(request)
    if not settings.app.rate_limit_include_headers:
        return response

    decision = getattr(request.state, "rate_limit", None)
    if isinstance(decision, RateLimitDecision) and decision.admitted:
        for name, value in rate_limit_headers(decision).items():
            response.headers.setdefault(name, value)
    return response
