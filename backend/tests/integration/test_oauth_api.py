# tests/integration/test_oauth_api.py
"""
Integration tests for Google sign-in.

Google's token and userinfo endpoints are mocked with ``responses``; the
API talks to them through the real ``requests`` adapter.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import responses

from learnhub.api.v1.auth import OAUTH_STATE_COOKIE
from learnhub.infra.oauth.google_oauth_provider import (
    GOOGLE_AUTH_URL,
    GOOGLE_TOKEN_URL,
    GOOGLE_USERINFO_URL,
)
from learnhub.models.user import User
from tests.factories.user import UserFactory

BASE = "/api/v1/auth"


def _start(client) -> str:
    resp = client.get(f"{BASE}/google")
    assert resp.status_code == 302
    cookie = client.get_cookie(OAUTH_STATE_COOKIE)
    assert cookie is not None
    return cookie.value


def _mock_google(*, email: str = "grace@example.com", verified: bool = True) -> None:
    responses.add(
        responses.POST,
        GOOGLE_TOKEN_URL,
        json={"access_token": "google-access", "token_type": "Bearer", "expires_in": 3599},
        status=200,
    )
    responses.add(
        responses.GET,
        GOOGLE_USERINFO_URL,
        json={
            "sub": "1098765",
            "email": email,
            "email_verified": verified,
            "name": "Grace Hopper",
            "picture": "https://example.com/grace.png",
        },
        status=200,
    )


def test_google_login_redirects_with_state(client, session):
    resp = client.get(f"{BASE}/google")

    assert resp.status_code == 302
    location = resp.headers["Location"]
    assert location.startswith(GOOGLE_AUTH_URL)
    query = parse_qs(urlsplit(location).query)
    assert query["client_id"] == ["test-client-id"]
    assert query["response_type"] == ["code"]
    assert query["state"] == [client.get_cookie(OAUTH_STATE_COOKIE).value]


@responses.activate
def test_google_callback_creates_student_and_opens_session(client, session):
    state = _start(client)
    _mock_google()

    resp = client.get(f"{BASE}/google/redirect", query_string={"code": "auth-code", "state": state})

    assert resp.status_code == 200, resp.get_json()
    data = resp.get_json()["data"]
    assert data["email"] == "grace@example.com"
    assert data["roles"] == ["student"]
    assert data["token_type"] == "bearer"

    # Code exchanged server-side, access token forwarded to userinfo
    assert "code=auth-code" in responses.calls[0].request.body
    assert responses.calls[1].request.headers["Authorization"] == "Bearer google-access"

    user = session.query(User).filter_by(email="grace@example.com").one()
    assert user.password_hash is None
    assert user.provider_id == "1098765"

    refreshed = client.post(f"{BASE}/refresh", json={"refresh_token": data["refresh_token"]})
    assert refreshed.status_code == 200


@responses.activate
def test_google_callback_signs_in_existing_account(client, session):
    existing = UserFactory(email="grace@example.com")
    state = _start(client)
    _mock_google()

    resp = client.get(f"{BASE}/google/redirect", query_string={"code": "auth-code", "state": state})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["user_id"] == str(existing.id)
    assert session.query(User).filter_by(email="grace@example.com").count() == 1


@responses.activate
def test_google_callback_rejects_forged_state(client, session):
    _start(client)

    resp = client.get(f"{BASE}/google/redirect", query_string={"code": "auth-code", "state": "forged"})

    assert resp.status_code == 401
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["detail"] == "OAuth login failed"
    assert len(responses.calls) == 0


@responses.activate
def test_google_callback_without_state_cookie_fails(client, session):
    resp = client.get(f"{BASE}/google/redirect", query_string={"code": "auth-code", "state": "abc"})

    assert resp.status_code == 401
    assert len(responses.calls) == 0


@responses.activate
def test_google_callback_rejects_unverified_email(client, session):
    state = _start(client)
    _mock_google(verified=False)

    resp = client.get(f"{BASE}/google/redirect", query_string={"code": "auth-code", "state": state})

    assert resp.status_code == 401
    assert session.query(User).filter_by(email="grace@example.com").count() == 0


@responses.activate
def test_google_callback_handles_failed_code_exchange(client, session):
    state = _start(client)
    responses.add(responses.POST, GOOGLE_TOKEN_URL, json={"error": "invalid_grant"}, status=400)

    resp = client.get(f"{BASE}/google/redirect", query_string={"code": "stale", "state": state})

    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "OAuth login failed"


def test_google_callback_reports_provider_error(client, session):
    state = _start(client)

    resp = client.get(f"{BASE}/google/redirect", query_string={"error": "access_denied", "state": state})

    assert resp.status_code == 401


def test_google_login_unconfigured_is_unavailable(app, client, session):
    app.config["GOOGLE_CLIENT_ID"] = None

    resp = client.get(f"{BASE}/google")

    assert resp.status_code == 503
    assert resp.mimetype == "application/problem+json"
