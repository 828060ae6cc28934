"""Caller identification for rate limiting.

Authenticated callers are keyed by user id, which is unambiguous and survives
IP changes. Anonymous callers fall back to the client address taken from the
proxy headers. Callers without any usable address share the ``ip:unknown``
bucket.

Authentication itself happens upstream: the gateway in front of this service
verifies the session and forwards the user id in a trusted header. The header
is taken at face value, so a caller reaching the service directly could rotate
it to dodge its address budget. Set ``APP_TRUST_USER_ID_HEADER=false`` when no
such gateway strips client-supplied values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from fastapi import Request

from shamba_gate.core.config import settings

USER_PREFIX = "user:"
IP_PREFIX = "ip:"
UNKNOWN_ADDRESS = "unknown"


@dataclass(frozen=True)
class RequestIdentity:
    """What the HTTP layer knows about the caller.

    Attributes:
        user_id: Authenticated user id, if the upstream gateway supplied one.
        headers: Raw request headers.
    """

    user_id: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)


def _get_header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        # Plain dicts are case-sensitive; Starlette Headers are not
        for key, candidate in headers.items():
            if key.lower() == name:
                return candidate
    return value


def resolve_client_address(headers: Mapping[str, str]) -> str:
    """Pick the client address from proxy headers.

    Precedence: first entry of ``x-forwarded-for``, then ``x-real-ip``, then
    ``"unknown"``.

    Examples:
        >>> resolve_client_address({"x-forwarded-for": "9.9.9.9, 10.0.0.1"})
        '9.9.9.9'
        >>> resolve_client_address({"x-real-ip": "5.6.7.8"})
        '5.6.7.8'
        >>> resolve_client_address({})
        'unknown'
    """
    forwarded_for = _get_header(headers, "x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    real_ip = _get_header(headers, "x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return UNKNOWN_ADDRESS


def derive_identifier(headers: Mapping[str, str], user_id: str | None = None) -> str:
    """Build the namespaced rate limit identifier for a caller.

    Args:
        headers: Request headers (any mapping; lookup is case-insensitive).
        user_id: Authenticated user id, if known. Takes precedence over headers.

    Returns:
        ``"user:<id>"`` or ``"ip:<address>"``. Never raises.
    """
    if user_id:
        return f"{USER_PREFIX}{user_id}"
    return f"{IP_PREFIX}{resolve_client_address(headers)}"


def identifier_type(identifier: str) -> str:
    """Return the namespace of an identifier (``user`` or ``ip``)."""
    return identifier.split(":", 1)[0]


def get_request_identity(request: Request) -> RequestIdentity:
    """FastAPI dependency extracting the caller identity from a request."""
    user_id = None
    if settings.app.trust_user_id_header:
        user_id = request.headers.get(settings.app.user_id_header) or None
    return RequestIdentity(user_id=user_id, headers=request.headers)
