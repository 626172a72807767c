from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from learnhub.services._shared.errors import AccessTokenExpiredError, InvalidSignatureError


class AccessTokenIssuer(Protocol):
    """Port for minting and verifying short-lived signed access tokens."""

    def issue(self, *, user_id: str, email: str, roles: Iterable[str]) -> str:
        """Sign ``{sub, email, roles}`` with the process-wide key."""

    def verify(self, token: str) -> dict[str, Any]:
        """
        Return the claims of a valid token.

        :raises AccessTokenExpiredError: If the token is past its ``exp``.
        :raises InvalidSignatureError: For any other verification failure.
        """


class StubAccessTokenIssuer(AccessTokenIssuer):
    """Deterministic issuer used in unit tests."""

    def __init__(self, *, expires_delta: timedelta = timedelta(minutes=15)) -> None:
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}
        self.expires_delta = expires_delta

    def issue(self, *, user_id: str, email: str, roles: Iterable[str]) -> str:
        self._seq += 1
        token = f"access.{user_id}.{self._seq}"
        self._issued[token] = {
            "sub": user_id,
            "email": email,
            "roles": sorted(getattr(r, "value", r) for r in roles),
            "exp": int((datetime.now(UTC) + self.expires_delta).timestamp()),
        }
        return token

    def verify(self, token: str) -> dict[str, Any]:
        claims = self._issued.get(token)
        if claims is None:
            raise InvalidSignatureError()
        if claims["exp"] <= int(datetime.now(UTC).timestamp()):
            raise AccessTokenExpiredError()
        return dict(claims)
