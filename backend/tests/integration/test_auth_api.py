# tests/integration/test_auth_api.py
"""
Integration tests for the authentication and session endpoints.

Covers:
- Registration, login and refresh responses
- Rotation and reuse detection through HTTP
- Lenient logout, session listing and per-session revocation
- Problem+JSON error payloads
"""

from __future__ import annotations

import fakeredis
import pytest

from tests.factories.user import DEFAULT_PASSWORD, OAuthUserFactory, UserFactory

BASE = "/api/v1/auth"
INVALID_TOKEN = "Invalid or expired refresh token"


def _login(client, email: str, password: str = DEFAULT_PASSWORD, **headers):
    resp = client.post(f"{BASE}/login", json={"email": email, "password": password}, headers=headers)
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user(session):
    return UserFactory(email="ada@example.com")


# ------------------------------- Register --------------------------------- #
def test_register_creates_limited_account(client, session):
    resp = client.post(
        f"{BASE}/register",
        json={"email": "New@Example.com", "password": "longenough", "name": "New"},
    )

    assert resp.status_code == 201
    body = resp.get_json()["data"]
    assert body["email"] == "new@example.com"
    assert body["roles"] == ["limited_access_user"]
    assert "password" not in body and "password_hash" not in body


def test_register_duplicate_email_conflicts(client, user):
    resp = client.post(
        f"{BASE}/register",
        json={"email": "ada@example.com", "password": "longenough", "name": "Again"},
    )
    assert resp.status_code == 409
    assert resp.mimetype == "application/problem+json"


def test_register_validation_errors(client, session):
    resp = client.post(f"{BASE}/register", json={"email": "not-an-email", "password": "short"})

    assert resp.status_code == 422
    errors = resp.get_json()["details"]["errors"]
    assert {"email", "password", "name"} <= set(errors)


# --------------------------------- Login ---------------------------------- #
def test_login_returns_token_pair(client, user):
    data = _login(client, "ada@example.com")

    assert data["token_type"] == "bearer"
    assert data["user_id"] == str(user.id)
    assert data["roles"] == ["student"]
    token_id, _, secret = data["refresh_token"].partition(".")
    assert len(token_id) == 32 and len(secret) == 64


@pytest.mark.parametrize(
    "email, password",
    [("ada@example.com", "wrong-password"), ("ghost@example.com", DEFAULT_PASSWORD)],
)
def test_login_failures_are_indistinguishable(client, user, email, password):
    resp = client.post(f"{BASE}/login", json={"email": email, "password": password})

    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Invalid credentials"


def test_oauth_account_cannot_log_in_with_password(client, session):
    OAuthUserFactory(email="g@example.com")
    resp = client.post(f"{BASE}/login", json={"email": "g@example.com", "password": DEFAULT_PASSWORD})
    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Invalid credentials"


# -------------------------------- Refresh --------------------------------- #
def test_refresh_rotates_and_detects_reuse(client, user):
    login = _login(client, "ada@example.com")
    other = _login(client, "ada@example.com")

    first = client.post(f"{BASE}/refresh", json={"refresh_token": login["refresh_token"]})
    assert first.status_code == 200
    rotated = first.get_json()["data"]
    assert rotated["refresh_token"] != login["refresh_token"]

    replay = client.post(f"{BASE}/refresh", json={"refresh_token": login["refresh_token"]})
    assert replay.status_code == 401
    assert replay.mimetype == "application/problem+json"
    assert replay.get_json()["detail"] == INVALID_TOKEN

    # Reuse revoked every session of the user
    for token in (rotated["refresh_token"], other["refresh_token"]):
        resp = client.post(f"{BASE}/refresh", json={"refresh_token": token})
        assert resp.status_code == 401


@pytest.mark.parametrize("token", ["garbage", "a" * 32 + ".deadbeef", ".", ""])
def test_refresh_rejects_bad_tokens_uniformly(client, session, token):
    resp = client.post(f"{BASE}/refresh", json={"refresh_token": token})
    assert resp.status_code == 401
    assert resp.get_json()["detail"] == INVALID_TOKEN


def test_refresh_requires_token_field(client, session):
    resp = client.post(f"{BASE}/refresh", json={})
    assert resp.status_code == 422


def test_access_token_from_refresh_authenticates(client, user):
    login = _login(client, "ada@example.com")
    pair = client.post(f"{BASE}/refresh", json={"refresh_token": login["refresh_token"]}).get_json()["data"]

    resp = client.get("/api/v1/users/me", headers=_bearer(pair["access_token"]))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["email"] == "ada@example.com"


# -------------------------------- Logout ---------------------------------- #
def test_logout_is_lenient(client, user):
    login = _login(client, "ada@example.com")

    for body in ({"refresh_token": login["refresh_token"]}, {"refresh_token": login["refresh_token"]}, {}, {"refresh_token": "junk"}):
        resp = client.post(f"{BASE}/logout", json=body)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["message"] == "Session has been revoked successfully"

    resp = client.post(f"{BASE}/refresh", json={"refresh_token": login["refresh_token"]})
    assert resp.status_code == 401


def test_logout_with_rotated_token_revokes_all_sessions(client, user):
    first = _login(client, "ada@example.com")
    second = _login(client, "ada@example.com")
    rotated = client.post(f"{BASE}/refresh", json={"refresh_token": first["refresh_token"]}).get_json()["data"]

    resp = client.post(f"{BASE}/logout", json={"refresh_token": first["refresh_token"]})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["message"] == "Session has been revoked successfully"
    sessions = client.get(f"{BASE}/sessions", headers=_bearer(second["access_token"])).get_json()["data"]
    assert sessions == []
    for token in (rotated["refresh_token"], second["refresh_token"]):
        assert client.post(f"{BASE}/refresh", json={"refresh_token": token}).status_code == 401


def test_logout_all_devices(client, user):
    first = _login(client, "ada@example.com")
    second = _login(client, "ada@example.com")

    resp = client.post(f"{BASE}/logout-all-devices", headers=_bearer(first["access_token"]))

    assert resp.status_code == 200
    assert resp.get_json()["data"]["message"] == "All sessions have been revoked successfully"
    for token in (first["refresh_token"], second["refresh_token"]):
        assert client.post(f"{BASE}/refresh", json={"refresh_token": token}).status_code == 401


def test_logout_all_requires_bearer(client, session):
    resp = client.post(f"{BASE}/logout-all-devices")
    assert resp.status_code == 401
    assert resp.get_json()["detail"] == "Missing bearer token"


# ------------------------------- Sessions --------------------------------- #
def test_sessions_list_and_revoke(client, user):
    first = _login(client, "ada@example.com", **{"User-Agent": "phone/1.0"})
    second = _login(client, "ada@example.com", **{"User-Agent": "laptop/2.0"})
    headers = _bearer(second["access_token"])

    listed = client.get(f"{BASE}/sessions", headers=headers).get_json()["data"]
    assert {s["user_agent"] for s in listed} == {"phone/1.0", "laptop/2.0"}
    assert all(s["expired"] is False for s in listed)
    assert all("token_hash" not in s for s in listed)

    phone_id = first["refresh_token"].split(".", 1)[0]
    resp = client.delete(f"{BASE}/sessions/{phone_id}", headers=headers)
    assert resp.status_code == 200

    remaining = client.get(f"{BASE}/sessions", headers=headers).get_json()["data"]
    assert [s["id"] for s in remaining] == [second["refresh_token"].split(".", 1)[0]]


def test_cannot_revoke_another_users_session(client, user):
    UserFactory(email="eve@example.com")
    victim = _login(client, "ada@example.com")
    eve = _login(client, "eve@example.com")

    victim_id = victim["refresh_token"].split(".", 1)[0]
    resp = client.delete(f"{BASE}/sessions/{victim_id}", headers=_bearer(eve["access_token"]))

    assert resp.status_code == 403
    assert client.post(f"{BASE}/refresh", json={"refresh_token": victim["refresh_token"]}).status_code == 200


def test_revoking_unknown_session_succeeds(client, user):
    login = _login(client, "ada@example.com")
    resp = client.delete(f"{BASE}/sessions/{'f' * 32}", headers=_bearer(login["access_token"]))
    assert resp.status_code == 200


def test_sessions_with_tampered_access_token(client, user):
    login = _login(client, "ada@example.com")
    resp = client.get(f"{BASE}/sessions", headers=_bearer(login["access_token"] + "x"))
    assert resp.status_code == 401


# ----------------------------- Redis wiring ------------------------------- #
def test_sessions_live_in_redis_when_configured(app, client, user):
    fake = fakeredis.FakeRedis()
    app.extensions["redis_client"] = fake
    try:
        login = _login(client, "ada@example.com")
        token_id = login["refresh_token"].split(".", 1)[0]

        assert fake.exists(f"rt:{token_id}")
        assert fake.sismember(f"rt:u:{user.id}", token_id)
        resp = client.post(f"{BASE}/refresh", json={"refresh_token": login["refresh_token"]})
        assert resp.status_code == 200
    finally:
        app.extensions.pop("redis_client", None)
