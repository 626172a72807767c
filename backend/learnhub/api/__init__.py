"""HTTP surface of LearnHub: versioned blueprints for health, auth and users."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join_prefix(base: str, relative: str) -> str:
    segments = [s for s in (base.strip("/"), relative.strip("/")) if s]
    return "/" + "/".join(segments)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` pair under ``base_prefix``.

    For v1 this yields ``/api/v1`` for health, ``/api/v1/auth`` for login,
    refresh, logout, sessions and Google sign-in, and ``/api/v1/users`` for
    profile and role management. An empty relative prefix mounts at the
    version root.
    """

    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=_join_prefix(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Register ``API_BASE_PREFIX``/v1 routes on the app."""

    from learnhub.api.v1 import API_VERSION, REGISTRY

    api_base = app.config.get("API_BASE_PREFIX", "/api")
    register_blueprint_group(app, base_prefix=f"{api_base}/{API_VERSION}", entries=REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
