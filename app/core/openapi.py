"""OpenAPI metadata and customization utilities.

Enriches the generated schema with tag descriptions and documents the
429 response every rate-limited operation can return. Keeps documentation
concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "Users",
        "description": "Create, read, update and delete user records.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]

_RATE_LIMITED_RESPONSE = {
    "description": "Too many requests from this client within the current window.",
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata.

    - Adds tags metadata if not present
    - Documents a 429 response on every operation tagged ``Users``
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for methods in schema.get("paths", {}).values():
            for method_obj in methods.values():
                if isinstance(method_obj, dict) and "Users" in method_obj.get("tags", []):
                    method_obj.setdefault("responses", {}).setdefault(
                        "429", _RATE_LIMITED_RESPONSE
                    )

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
