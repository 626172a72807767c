"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never depend on Flask or HTTP.
They serve as stable contracts between stores, directories and application
services.

The translation to HTTP responses (RFC 7807) is handled by
``learnhub/core/errors.py`` via ``BaseService.translate_exceptions()``.

Infrastructure failures (:class:`StoreUnavailableError`,
:class:`HashingFailureError`) deliberately do *not* derive from
:class:`ServiceError`: services never recover from them, they abort the
enclosing operation.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint name to match (e.g., ``"uq_users_email"``).
    :returns: True if the IntegrityError mentions the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them through ``BaseService.translate_exceptions``.
    """

    pass


# --------------------------------------------------------------------------- #
# Generic domain errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "User").
    :param key: Identifier or search key.
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :param detail: Short human-readable explanation.
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class DuplicateAccountError(ConflictError):
    """Registration attempted with an email that already has an account."""

    def __init__(self, email: str) -> None:
        super().__init__(entity="User", detail="Email already registered")
        self.email = email


class AuthorizationError(ServiceError):
    """The caller is authenticated but not allowed to perform the operation."""

    def __init__(
        self,
        message: str = "Access denied: you do not have permission to access this resource",
    ) -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Refresh token lifecycle
# --------------------------------------------------------------------------- #


class InvalidTokenError(ServiceError):
    """
    A refresh token could not be accepted.

    Raised as-is when the secret does not match the stored hash. The
    subclasses below let the service and its logs tell failure modes apart;
    callers receive :attr:`public_message` for all of them so the response
    cannot be used as an oracle.
    """

    public_message = "Invalid or expired refresh token"

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class MalformedTokenError(InvalidTokenError):
    """The raw token does not have the ``<id>.<secret>`` shape."""

    def __init__(self) -> None:
        super().__init__("Invalid token format")


class TokenNotFoundError(InvalidTokenError):
    """No record exists for the id embedded in the raw token."""

    def __init__(self) -> None:
        super().__init__("Token not found")


class TokenRevokedError(InvalidTokenError):
    """
    A revoked token was presented again.

    By the time this is raised every session of the owning account has been
    revoked.
    """

    def __init__(self) -> None:
        super().__init__("Token has been revoked")


class TokenExpiredError(InvalidTokenError):
    """The record exists and is not revoked, but its ``expires_at`` has passed."""

    def __init__(self) -> None:
        super().__init__("Token has expired")


class UserNotFoundError(ServiceError):
    """A valid refresh token references an account that no longer exists."""

    def __init__(self, user_id: str) -> None:
        super().__init__("User not found")
        self.user_id = user_id


# --------------------------------------------------------------------------- #
# Credentials
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """
    Login failed.

    Subclasses record *why* for logs; the caller only ever sees
    :attr:`public_message`, so whether an email is registered cannot be
    learned from the login endpoint.
    """

    public_message = "Invalid credentials"

    def __init__(self, reason: str = "invalid_credentials") -> None:
        super().__init__(reason)
        self.reason = reason


class EmailNotFoundError(InvalidCredentialsError):
    def __init__(self) -> None:
        super().__init__("email_not_found")


class IncorrectPasswordError(InvalidCredentialsError):
    def __init__(self) -> None:
        super().__init__("incorrect_password")


class PasswordLoginUnavailableError(InvalidCredentialsError):
    """The account was created through OAuth and has no password."""

    def __init__(self) -> None:
        super().__init__("password_login_unavailable")


# --------------------------------------------------------------------------- #
# Access tokens
# --------------------------------------------------------------------------- #


class AccessTokenError(ServiceError):
    """An access token failed verification."""


class AccessTokenExpiredError(AccessTokenError):
    def __init__(self) -> None:
        super().__init__("Access token has expired")


class InvalidSignatureError(AccessTokenError):
    def __init__(self, message: str = "Access token is invalid") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


class StoreUnavailableError(Exception):
    """The token store (database or Redis) could not serve the request."""


class HashingFailureError(Exception):
    """The credential hasher failed (bad digest format, unsupported method...)."""


# --------------------------------------------------------------------------- #
# OAuth
# --------------------------------------------------------------------------- #


class OAuthLoginError(ServiceError):
    """
    The OAuth handshake did not yield a verified profile.

    ``reason`` is logged; callers only see :attr:`public_message`.
    """

    public_message = "OAuth login failed"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason
