"""CORS policy for the API blueprints."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

#: Headers browsers may send on cross-origin API calls.
ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-ID"]


def _parse_origins(raw: str | list[str] | None) -> list[str]:
    if isinstance(raw, list):
        return [o.strip() for o in raw if o and o.strip()]
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


def init_app(app: Flask) -> None:
    """Attach Flask-CORS to ``/api/*`` using ``CORS_ORIGINS``.

    A blank value or ``"*"`` admits any origin without credentials; an
    explicit list enables credentials so browser clients can send the
    ``Authorization`` header. ``X-Request-ID`` is exposed so clients can quote
    it in bug reports.
    """
    origins = _parse_origins(app.config.get("CORS_ORIGINS"))
    wildcard = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
