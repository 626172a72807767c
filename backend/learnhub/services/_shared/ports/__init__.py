"""
learnhub.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) the session services depend on.

Modules
-------
- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore`, :class:`~.RefreshTokenRecord` and
    :class:`~.RevokeResult`, plus an in-memory implementation.
- :mod:`credential_hasher`:
    :class:`~.CredentialHasher` for passwords and refresh-token secrets.
- :mod:`access_token_issuer`:
    :class:`~.AccessTokenIssuer` for signed access tokens, plus a stub.
- :mod:`user_directory`:
    :class:`~.UserDirectory` and the :class:`~.AccountIdentity` view, plus an
    in-memory implementation.
- :mod:`oauth_provider`:
    :class:`~.OAuthProvider` for the authorization-code login flow.

Concrete adapters (SQLAlchemy, Redis, flask-jwt-extended, werkzeug and a
requests-based Google client) live under ``learnhub.infra``.
"""

from __future__ import annotations

from .access_token_issuer import AccessTokenIssuer, StubAccessTokenIssuer
from .credential_hasher import CredentialHasher
from .oauth_provider import OAuthProvider
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
    RevokeResult,
)
from .user_directory import AccountIdentity, InMemoryUserDirectory, UserDirectory

__all__ = [
    "AccessTokenIssuer",
    "StubAccessTokenIssuer",
    "CredentialHasher",
    "OAuthProvider",
    "RefreshTokenStore",
    "RefreshTokenRecord",
    "RevokeResult",
    "InMemoryRefreshTokenStore",
    "UserDirectory",
    "AccountIdentity",
    "InMemoryUserDirectory",
]
