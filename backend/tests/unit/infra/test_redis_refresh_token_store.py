# tests/unit/infra/test_redis_refresh_token_store.py
"""
Unit tests for RedisRefreshTokenStore using fakeredis.

They run entirely in-memory and cover the record round-trip, the
compare-and-set revocation, bulk revocation and error mapping.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
import redis

from learnhub.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from learnhub.services._shared.errors import StoreUnavailableError
from learnhub.services._shared.ports import RefreshTokenRecord, RevokeResult


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


def _record(token_id: str, user_id: str = "u1", **overrides) -> RefreshTokenRecord:
    fields = {
        "id": token_id,
        "user_id": user_id,
        "token_hash": f"hash-{token_id}",
        "expires_at": _now() + timedelta(days=30),
        "user_agent": "ua/1",
        "ip": "1.2.3.4",
    }
    fields.update(overrides)
    return RefreshTokenRecord(**fields)


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisRefreshTokenStore(r=fake_redis)


def test_create_and_find(store, fake_redis):
    created = store.create(_record("a"))

    found = store.find_by_id("a")
    assert found == created
    assert found.user_id == "u1"
    assert found.token_hash == "hash-a"
    assert found.revoked is False
    assert found.expires_at.tzinfo is not None
    assert found.created_at is not None
    # No Redis TTL: records outlive their expiry
    assert fake_redis.ttl("rt:a") == -1


def test_create_rejects_duplicate_id(store):
    store.create(_record("a"))
    with pytest.raises(ValueError):
        store.create(_record("a"))


def test_find_missing(store):
    assert store.find_by_id("nope") is None


def test_optional_metadata_round_trips_as_none(store):
    store.create(_record("a", user_agent=None, ip=None))
    found = store.find_by_id("a")
    assert found.user_agent is None
    assert found.ip is None


def test_find_active_by_user_filters_revoked_only(store):
    store.create(_record("a"))
    store.create(_record("b", expires_at=_now() - timedelta(days=1)))
    store.create(_record("c"))
    store.create(_record("d", user_id="u2"))
    store.revoke_by_id("c")

    assert {r.id for r in store.find_active_by_user("u1")} == {"a", "b"}


def test_revoke_by_id(store):
    store.create(_record("a"))

    updated = store.revoke_by_id("a")

    assert updated.revoked is True
    assert store.revoke_by_id("a").revoked is True
    assert store.revoke_by_id("missing") is None


def test_revoke_if_active_reports_outcome(store):
    store.create(_record("a"))

    assert store.revoke_if_active("a") is RevokeResult.REVOKED
    assert store.revoke_if_active("a") is RevokeResult.ALREADY_REVOKED
    assert store.revoke_if_active("missing") is RevokeResult.NOT_FOUND


def test_revoke_all_for_user(store):
    store.create(_record("a"))
    store.create(_record("b"))
    store.create(_record("c", user_id="u2"))

    store.revoke_all_for_user("u1")

    assert store.find_active_by_user("u1") == []
    assert store.find_by_id("a").revoked is True
    assert [r.id for r in store.find_active_by_user("u2")] == ["c"]
    # Index is kept so later reuse of these ids is still attributable
    assert store.r.scard("rt:u:u1") == 2


def test_update_hash(store):
    store.create(_record("a"))
    store.update_hash("a", "new-hash")
    assert store.find_by_id("a").token_hash == "new-hash"
    store.update_hash("missing", "x")
    assert store.find_by_id("missing") is None


def test_redis_errors_become_store_unavailable(store, monkeypatch):
    def down(*args, **kwargs):
        raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(store.r, "hgetall", down)

    with pytest.raises(StoreUnavailableError):
        store.find_by_id("a")


@pytest.mark.parametrize("expires_at", [None, "not-a-timestamp"])
def test_corrupt_record_becomes_store_unavailable(store, fake_redis, expires_at):
    fields = {"user_id": "u1", "token_hash": "h", "revoked": "0"}
    if expires_at is not None:
        fields["expires_at"] = expires_at
    fake_redis.hset("rt:x", mapping=fields)

    with pytest.raises(StoreUnavailableError, match="Corrupt refresh token record: x"):
        store.find_by_id("x")
