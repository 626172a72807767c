# learnhub/infra/jwt/flask_jwt_access_token_issuer.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

import jwt
from flask_jwt_extended.exceptions import JWTExtendedException

from learnhub.services._shared.errors import AccessTokenExpiredError, InvalidSignatureError
from learnhub.services._shared.ports import AccessTokenIssuer

ACCESS_TOKEN_TYPE = "access"


@dataclass(slots=True)
class FlaskJWTAccessTokenIssuer(AccessTokenIssuer):
    """
    Adapter for Flask-JWT-Extended.

    Signing key and lifetime come from ``JWT_SECRET_KEY`` and
    ``JWT_ACCESS_TOKEN_EXPIRES`` unless ``expires_delta`` is given.

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    expires_delta: timedelta | None = None

    def issue(self, *, user_id: str, email: str, roles: Iterable[str]) -> str:
        from flask_jwt_extended import create_access_token

        claims = {
            "email": email,
            "roles": sorted(getattr(r, "value", r) for r in roles),
        }
        kwargs: dict[str, Any] = {"identity": str(user_id), "additional_claims": claims}
        if self.expires_delta is not None:
            kwargs["expires_delta"] = self.expires_delta
        return cast(str, create_access_token(**kwargs))

    def verify(self, token: str) -> dict[str, Any]:
        from flask_jwt_extended import decode_token

        try:
            claims = cast(dict[str, Any], decode_token(token))
        except jwt.ExpiredSignatureError as exc:
            raise AccessTokenExpiredError() from exc
        except (jwt.InvalidTokenError, JWTExtendedException) as exc:
            raise InvalidSignatureError() from exc

        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise InvalidSignatureError("Access token required")
        return claims
