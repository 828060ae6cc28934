"""Rate limiting dependency for FastAPI routes.

This module wires the rate limit store into the HTTP layer.

- Routes declare the policy they need: ``Depends(enforce_rate_limit(AI))``.
- The store is owned by the application (``app.state.rate_limit_store``) and
  created by the app factory, never at import time.
- Rejections raise ``RateLimitExceeded``; the exception handler turns it into
  the standard 429 response.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Awaitable, Callable

from fastapi import Depends, Request

from shamba_gate.adapters.rate_limit.base import (
    AbstractRateLimitStore,
    RateLimitDecision,
    RateLimitPolicy,
)
from shamba_gate.core.config import settings
from shamba_gate.core.errors import RateLimitExceeded
from shamba_gate.core.identity import (
    RequestIdentity,
    derive_identifier,
    get_request_identity,
    identifier_type,
)
from shamba_gate.core.policies import policy_scope

logger = logging.getLogger(__name__)


def get_rate_limit_store(request: Request) -> AbstractRateLimitStore:
    """Return the store owned by the running application.

    Raises:
        RuntimeError: If the application was started without a store.
    """

    store = getattr(request.app.state, "rate_limit_store", None)
    if store is None:
        raise RuntimeError("rate limit store is not initialized; was the app lifespan run?")
    return store


def _hash_identifier(identifier: str) -> str:
    """Hash the identifier for logging without exposing user ids or addresses."""
    return hashlib.sha256(identifier.encode()).hexdigest()[:16]


def apply_rate_limit(
    request: Request,
    store: AbstractRateLimitStore,
    identity: RequestIdentity,
    policy: RateLimitPolicy,
    *,
    scope: str | None = None,
) -> RateLimitDecision | None:
    """Count one request against the caller's budget for ``policy``.

    The caller identifier is stored on ``request.state.rate_limit_identifier``
    and the decision on ``request.state.rate_limit`` so handlers and the
    response can report them.

    Args:
        request: FastAPI request.
        store: Store holding the caller windows.
        identity: Caller identity extracted from the request.
        policy: Budget to enforce.
        scope: Budget namespace. Defaults to the policy (see ``policy_scope``),
            so routes with different policies never share a window. Pass the
            same explicit scope to make routes share one.

    Returns:
        The admitted decision, or None when rate limiting is disabled.

    Raises:
        RateLimitExceeded: When the caller is over budget.
    """

    identifier = derive_identifier(identity.headers, identity.user_id)
    request.state.rate_limit_identifier = identifier

    if not settings.app.rate_limit_enabled:
        return None

    scope = scope or policy_scope(policy)
    decision = store.check(f"{scope}:{identifier}", policy)
    request.state.rate_limit = decision

    log_fields = {
        "key_type": identifier_type(identifier),
        "key_hash": _hash_identifier(identifier),
        "scope": scope,
        "limit": policy.max_requests,
        "window_ms": policy.window_ms,
        "remaining": decision.remaining,
        "reset_time": decision.reset_time,
    }

    if decision.admitted:
        logger.info("rate_limit.allowed", extra=log_fields)
        return decision

    logger.warning("rate_limit.exceeded", extra=log_fields)
    raise RateLimitExceeded(decision)


def enforce_rate_limit(
    policy: RateLimitPolicy,
    *,
    scope: str | None = None,
) -> Callable[..., Awaitable[RateLimitDecision | None]]:
    """Build a FastAPI dependency enforcing ``policy``.

    Usage:
        @router.post("/ai/chat", dependencies=[Depends(enforce_rate_limit(AI))])
        async def chat(): ...

    Args:
        policy: Budget to enforce for the decorated route.
        scope: Optional budget namespace, see ``apply_rate_limit``.

    Returns:
        Async dependency returning the decision (None when limiting is disabled).
    """

    async def dependency(
        request: Request,
        identity: RequestIdentity = Depends(get_request_identity),
        store: AbstractRateLimitStore = Depends(get_rate_limit_store),
    ) -> RateLimitDecision | None:
        return apply_rate_limit(request, store, identity, policy, scope=scope)

    return dependency
