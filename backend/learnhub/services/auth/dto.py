# learnhub/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from learnhub.services.refresh_tokens.dto import SessionMetadata, TokenPairOut

__all__ = [
    "RegisterIn",
    "LoginIn",
    "OAuthProfileIn",
    "LoginOut",
    "SessionOut",
    "SessionMetadata",
    "TokenPairOut",
]

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for local registration.

    :param email: Login email (normalized by the directory).
    :type email: str
    :param password: Raw password, hashed before it reaches the directory.
    :type password: str
    :param name: Display name.
    :type name: str
    """

    email: str
    password: str
    name: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for password login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class OAuthProfileIn:
    """
    Profile returned by an OAuth provider after a successful handshake.

    :param email: Verified email reported by the provider.
    :param name: Display name.
    :param provider_id: Subject id at the provider.
    :param avatar_url: Optional picture URL.
    """

    email: str
    name: str
    provider_id: str
    avatar_url: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Token pair plus the public identity of the signed-in account.

    :param access_token: Signed access token.
    :param refresh_token: Raw refresh token.
    :param user_id: Account id.
    :param email: Account email.
    :param name: Display name.
    :param roles: Role values, sorted.
    """

    access_token: str
    refresh_token: str
    user_id: str
    email: str
    name: str
    roles: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SessionOut:
    """
    One active session as shown to its owner.

    :param id: Refresh token record id (usable with ``revoke_session``).
    :param user_agent: Client user agent at issuance.
    :param ip: Client address at issuance.
    :param created_at: When the session was opened or last rotated.
    :param expires_at: Absolute expiry.
    :param expired: Whether ``expires_at`` has already passed.
    """

    id: str
    user_agent: str | None
    ip: str | None
    created_at: datetime | None
    expires_at: datetime
    expired: bool
