# learnhub/services/_shared/base.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from learnhub.core import errors as api_errors
from learnhub.services._shared.errors import (
    AccessTokenError,
    AuthorizationError,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    OAuthLoginError,
    ServiceError,
    UserNotFoundError,
)

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (auth, request ids, client info).

    :param actor_id: Authenticated account identifier.
    :param request_id: Correlation id for logging/tracing.
    :param user_agent: Client ``User-Agent`` header.
    :param ip: Client address (after proxy resolution).
    """

    actor_id: str | None = None
    request_id: str | None = None
    user_agent: str | None = None
    ip: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Hold the request-scoped :class:`ServiceContext`.
    * Centralize error translation to API errors.
    * Offer shared authorization helpers.

    Notes
    -----
    Services receive their collaborators (stores, directories, hashers,
    issuers) through their constructor and never reach for Flask globals.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        Token and credential failures collapse to stable messages so clients
        cannot distinguish an unknown email from a wrong password, or a
        forged token from an expired one.

        :param exc: Exception raised within the service.
        :returns: Translated exception ready to be re-raised.
        """
        if isinstance(exc, InvalidTokenError):
            return api_errors.Unauthorized(InvalidTokenError.public_message)

        if isinstance(exc, InvalidCredentialsError):
            return api_errors.Unauthorized(InvalidCredentialsError.public_message)

        if isinstance(exc, OAuthLoginError):
            return api_errors.Unauthorized(OAuthLoginError.public_message)

        if isinstance(exc, UserNotFoundError | AccessTokenError):
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, AuthorizationError):
            return api_errors.Forbidden(str(exc))

        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(exc.detail)

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc

    # --------------------------- AuthZ --------------------------------

    def ensure_owner(self, actor_id: str | None, owner_id: str, *, msg: str | None = None) -> None:
        """
        Ensure the current actor owns the resource.

        :raises AuthorizationError: If actor is not the owner.
        """
        from learnhub.services._shared.policies.common import is_owner

        if not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise AuthorizationError(msg or "You can only manage your own sessions.")
