# learnhub/services/refresh_tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SessionMetadata:
    """
    Provenance recorded with a refresh token.

    Informational only; never used for authorization decisions.

    :param user_agent: Client ``User-Agent`` header.
    :type user_agent: str | None
    :param ip: Client address.
    :type ip: str | None
    """

    user_agent: str | None = None
    ip: str | None = None


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Signed access token.
    :type access_token: str
    :param refresh_token: Raw refresh token (``<id>.<secret>``).
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class RevokeOut:
    """
    Result of a single-session revocation.

    :param message: Human-readable confirmation, identical whether or not the
        session existed.
    :type message: str
    """

    message: str


@dataclass(frozen=True, slots=True)
class RefreshTokenConfig:
    """
    Refresh token emission configuration.

    :param ttl_days: Lifetime of newly issued refresh tokens.
    :type ttl_days: int
    """

    ttl_days: int = 30
