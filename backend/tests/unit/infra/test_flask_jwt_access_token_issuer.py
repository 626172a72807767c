# tests/unit/infra/test_flask_jwt_access_token_issuer.py
from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from flask_jwt_extended import create_refresh_token

from learnhub.infra.jwt.flask_jwt_access_token_issuer import FlaskJWTAccessTokenIssuer
from learnhub.services._shared.errors import AccessTokenExpiredError, InvalidSignatureError


@pytest.fixture()
def issuer(app) -> FlaskJWTAccessTokenIssuer:
    return FlaskJWTAccessTokenIssuer()


def test_issue_and_verify_round_trip(issuer):
    token = issuer.issue(user_id="7", email="ada@example.com", roles=["student", "tutor"])

    claims = issuer.verify(token)

    assert claims["sub"] == "7"
    assert claims["email"] == "ada@example.com"
    assert claims["roles"] == ["student", "tutor"]
    assert claims["type"] == "access"
    assert claims["exp"] > claims["iat"]


def test_lifetime_comes_from_config(app, issuer):
    claims = issuer.verify(issuer.issue(user_id="1", email="a@b.c", roles=[]))
    expected = int(app.config["JWT_ACCESS_TOKEN_EXPIRES"].total_seconds())
    assert claims["exp"] - claims["iat"] == expected


def test_expired_token(app):
    expired = FlaskJWTAccessTokenIssuer(expires_delta=timedelta(seconds=-5))
    token = expired.issue(user_id="1", email="a@b.c", roles=[])

    with pytest.raises(AccessTokenExpiredError):
        FlaskJWTAccessTokenIssuer().verify(token)


def test_token_signed_with_another_key(issuer):
    forged = jwt.encode(
        {"sub": "1", "type": "access", "roles": ["admin"]},
        "some-other-key-that-is-long-enough-too",
        algorithm="HS256",
    )
    with pytest.raises(InvalidSignatureError):
        issuer.verify(forged)


def test_garbage_token(issuer):
    with pytest.raises(InvalidSignatureError):
        issuer.verify("not-a-jwt")


def test_refresh_type_jwt_is_rejected(issuer):
    token = create_refresh_token(identity="1")
    with pytest.raises(InvalidSignatureError, match="Access token required"):
        issuer.verify(token)
