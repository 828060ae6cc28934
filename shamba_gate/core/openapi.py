"""OpenAPI customization.

Adds tag descriptions and documents the identity headers the rate limiter
reads, keeping documentation concerns out of the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from shamba_gate.core.config import settings

TAGS_METADATA = [
    {
        "name": "Rate Limits",
        "description": "Policy catalog and admission checks for endpoint handlers.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]


def _identity_parameters() -> list[Dict[str, Any]]:
    return [
        {
            "name": settings.app.user_id_header,
            "in": "header",
            "required": False,
            "schema": {"type": "string"},
            "description": "Authenticated user id set by the upstream auth gateway.",
        },
        {
            "name": "X-Forwarded-For",
            "in": "header",
            "required": False,
            "schema": {"type": "string"},
            "description": "Proxy chain; the first entry is the client address.",
        },
        {
            "name": "X-Real-IP",
            "in": "header",
            "required": False,
            "schema": {"type": "string"},
            "description": "Client address when X-Forwarded-For is absent.",
        },
    ]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with tags and identity headers.

    The identity headers are documented on every ``/check`` operation since
    they are read from the raw request rather than declared as parameters.
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if not path.endswith("/check"):
                continue
            for method_obj in methods.values():
                if not isinstance(method_obj, dict):
                    continue
                params = method_obj.setdefault("parameters", [])
                known = {p.get("name") for p in params}
                params.extend(p for p in _identity_parameters() if p["name"] not in known)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
