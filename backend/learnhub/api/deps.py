"""Shared API helpers: service wiring, authentication guards and responses."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar, cast

from flask import Response, after_this_request, current_app, g, jsonify, request

from learnhub.core.errors import APIError, Forbidden, Unauthorized
from learnhub.core.rbac import DRAIN_TIMEOUT_SECONDS, drain_stream, is_authorized, required_roles_for
from learnhub.infra.jwt.flask_jwt_access_token_issuer import FlaskJWTAccessTokenIssuer
from learnhub.infra.oauth.google_oauth_provider import GoogleOAuthProvider
from learnhub.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from learnhub.infra.security.werkzeug_credential_hasher import WerkzeugCredentialHasher
from learnhub.infra.sql.sqlalchemy_refresh_token_store import SQLAlchemyRefreshTokenStore
from learnhub.infra.sql.sqlalchemy_user_directory import SQLAlchemyUserDirectory
from learnhub.services._shared.base import ServiceContext
from learnhub.services._shared.errors import AccessTokenError
from learnhub.services._shared.ports import (
    AccessTokenIssuer,
    CredentialHasher,
    OAuthProvider,
    RefreshTokenStore,
    UserDirectory,
)
from learnhub.services.auth.service import AuthService
from learnhub.services.identity.service import IdentityService
from learnhub.services.refresh_tokens.dto import RefreshTokenConfig, SessionMetadata
from learnhub.services.refresh_tokens.service import RefreshTokenService

F = TypeVar("F", bound=Callable[..., Any])


# ------------------------------ Wiring ---------------------------------------


def get_refresh_token_store() -> RefreshTokenStore:
    """Redis when a client is configured, else the ``refresh_tokens`` table."""

    client = current_app.extensions.get("redis_client")
    if client is not None:
        return RedisRefreshTokenStore(client)
    return SQLAlchemyRefreshTokenStore()


def get_user_directory() -> UserDirectory:
    return SQLAlchemyUserDirectory()


def get_hasher() -> CredentialHasher:
    return WerkzeugCredentialHasher(method=current_app.config.get("PASSWORD_HASH_METHOD", "scrypt"))


def get_access_token_issuer() -> AccessTokenIssuer:
    expires = current_app.config.get("JWT_ACCESS_TOKEN_EXPIRES")
    return FlaskJWTAccessTokenIssuer(expires if isinstance(expires, timedelta) else None)


def get_oauth_provider() -> OAuthProvider:
    """
    Google sign-in adapter built from the ``GOOGLE_*`` settings.

    :raises APIError: 503 when the client is not configured.
    """

    cfg = current_app.config
    client_id = cfg.get("GOOGLE_CLIENT_ID")
    client_secret = cfg.get("GOOGLE_CLIENT_SECRET")
    redirect_uri = cfg.get("GOOGLE_REDIRECT_URI")
    if not (client_id and client_secret and redirect_uri):
        raise APIError(
            "Google sign-in is not configured",
            status_code=503,
            code="service_unavailable",
        )
    return GoogleOAuthProvider(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=redirect_uri,
        timeout=float(cfg.get("OAUTH_HTTP_TIMEOUT_SECONDS", 10)),
    )


def service_context() -> ServiceContext:
    """Build the request-scoped context handed to services."""

    return ServiceContext(
        actor_id=g.get("actor_id"),
        request_id=g.get("request_id"),
        user_agent=request.headers.get("User-Agent") or None,
        ip=request.remote_addr,
    )


def session_metadata() -> SessionMetadata:
    ctx = service_context()
    return SessionMetadata(user_agent=ctx.user_agent, ip=ctx.ip)


def build_refresh_token_service() -> RefreshTokenService:
    ttl_days = int(current_app.config.get("REFRESH_TOKEN_TTL_DAYS", 30))
    return RefreshTokenService(
        store=get_refresh_token_store(),
        hasher=get_hasher(),
        users=get_user_directory(),
        access_tokens=get_access_token_issuer(),
        cfg=RefreshTokenConfig(ttl_days=ttl_days),
    )


def build_auth_service() -> AuthService:
    refresh_tokens = build_refresh_token_service()
    return AuthService(
        users=refresh_tokens.users,
        hasher=refresh_tokens.hasher,
        access_tokens=refresh_tokens.access_tokens,
        refresh_tokens=refresh_tokens,
        ctx=service_context(),
    )


def build_identity_service() -> IdentityService:
    return IdentityService(users=get_user_directory(), ctx=service_context())


# ------------------------------ Auth guards ----------------------------------


def bearer_token() -> str:
    """
    Return the token from ``Authorization: Bearer <token>``.

    :raises Unauthorized: If the header is missing or uses another scheme.
    """

    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Missing bearer token")
    return token.strip()


def _authenticate() -> dict[str, Any]:
    try:
        claims = get_access_token_issuer().verify(bearer_token())
    except AccessTokenError as exc:
        raise Unauthorized(str(exc)) from exc
    g.actor_id = str(claims["sub"])
    g.claims = claims
    return claims


def current_actor_id() -> str:
    return cast(str, g.actor_id)


def _drain_request_body() -> None:
    """Discard the unread body of a rejected request.

    If the body cannot be drained in time the connection is closed after the
    response, so the leftover bytes are never parsed as a next request.
    """
    if drain_stream(request.stream, timeout=DRAIN_TIMEOUT_SECONDS):
        return

    @after_this_request
    def _close_connection(response: Response) -> Response:
        response.headers["Connection"] = "close"
        return response


def require_roles(operation: str) -> Callable[[F], F]:
    """
    Gate a view behind the roles configured for ``operation``.

    A rejected request has its unread body drained (bounded by
    :data:`~learnhub.core.rbac.DRAIN_TIMEOUT_SECONDS`) before the error
    response is produced.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            try:
                claims = _authenticate()
            except Unauthorized:
                _drain_request_body()
                raise

            if not is_authorized(required_roles_for(operation), claims.get("roles") or ()):
                _drain_request_body()
                current_app.logger.warning(
                    "rbac.denied",
                    extra={"user_id": g.actor_id, "operation": operation},
                )
                raise Forbidden("Access denied: you do not have permission to access this resource")
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


# ------------------------------ Responses ------------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
