"""Cross-origin policy for the JSON API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

# Headers browsers may read from API responses
EXPOSED_HEADERS = (
    "X-Request-ID",
    "X-RateLimit-Limit",
    "X-RateLimit-Remaining",
    "X-RateLimit-Reset",
    "Retry-After",
)


def parse_origins(raw: str | None) -> list[str] | str:
    """Split ``CORS_ORIGINS``; blank or ``"*"`` means any origin."""
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or origins == ["*"]:
        return "*"
    return origins


def init_app(app: Flask) -> None:
    """Enable CORS beneath ``API_BASE_PREFIX``.

    Credentials are only allowed with an explicit origin list.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    api_prefix = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")

    CORS(
        app,
        resources={rf"{api_prefix}/*": {"origins": origins}},
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        expose_headers=list(EXPOSED_HEADERS),
        supports_credentials=origins != "*",
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
