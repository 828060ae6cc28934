from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from shamba_gate.adapters.rate_limit.base import AbstractRateLimitStore, RateLimitPolicy
from shamba_gate.core.identity import (
    RequestIdentity,
    get_request_identity,
    identifier_type,
)
from shamba_gate.core.policies import RATE_LIMITS, get_policy
from shamba_gate.core.rate_limit import apply_rate_limit, get_rate_limit_store
from shamba_gate.schemas.rate_limit import (
    PolicyCatalogResponse,
    PolicyInfo,
    RateLimitCheckResponse,
    RateLimitErrorResponse,
)

router = APIRouter(tags=["Rate Limits"])


def _resolve_policy(policy_name: str) -> RateLimitPolicy:
    return get_policy(policy_name)


@router.get("/limits", response_model=PolicyCatalogResponse)
async def list_policies() -> PolicyCatalogResponse:
    """List the named rate limit policies."""
    return PolicyCatalogResponse(
        policies={
            name: PolicyInfo(max_requests=policy.max_requests, window_ms=policy.window_ms)
            for name, policy in RATE_LIMITS.items()
        }
    )


@router.post(
    "/limits/{policy_name}/check",
    response_model=RateLimitCheckResponse,
    responses={429: {"model": RateLimitErrorResponse, "description": "Rate limit exceeded"}},
)
async def check_rate_limit(
    policy_name: str,
    request: Request,
    policy: RateLimitPolicy = Depends(_resolve_policy),
    identity: RequestIdentity = Depends(get_request_identity),
    store: AbstractRateLimitStore = Depends(get_rate_limit_store),
) -> RateLimitCheckResponse:
    """Count one request for the caller and report whether it is admitted.

    Endpoint handlers (or the gateway in front of them) call this before doing
    work. The caller is keyed by the forwarded user id header when present,
    otherwise by the client address from the proxy headers. Each policy keeps
    its own window per caller.

    Args:
        policy_name: AUTH, AI, API or EXPENSIVE (case-insensitive).
        request: FastAPI request.
        policy: Policy resolved from the path.
        identity: Caller identity extracted from the request.
        store: Application-owned rate limit store.

    Returns:
        RateLimitCheckResponse: Remaining quota for the admitted request.

    Raises:
        ValidationAppError: 400 when the policy name is unknown.
        RateLimitExceeded: 429 when the caller is over budget.
    """
    decision = apply_rate_limit(request, store, identity, policy)

    return RateLimitCheckResponse(
        policy=policy_name.upper(),
        identifier_type=identifier_type(request.state.rate_limit_identifier),
        max_requests=policy.max_requests,
        window_ms=policy.window_ms,
        # Limiting disabled: report the untouched budget
        remaining=decision.remaining if decision else policy.max_requests,
        reset_time=decision.reset_time if decision else 0,
    )
