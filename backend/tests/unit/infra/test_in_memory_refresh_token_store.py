# tests/unit/infra/test_in_memory_refresh_token_store.py
from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta

import pytest

from learnhub.services._shared.ports import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RevokeResult,
)


def _record(token_id: str, user_id: str = "u1") -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=token_id,
        user_id=user_id,
        token_hash="h",
        expires_at=datetime.now(UTC) + timedelta(days=1),
    )


def test_create_stamps_timestamps_and_rejects_duplicates():
    store = InMemoryRefreshTokenStore()
    created = store.create(_record("a"))

    assert created.created_at is not None
    assert created.updated_at == created.created_at
    with pytest.raises(ValueError):
        store.create(_record("a"))


def test_revocation_is_monotonic():
    store = InMemoryRefreshTokenStore()
    store.create(_record("a"))

    store.revoke_by_id("a")
    store.update_hash("a", "other")

    assert store.find_by_id("a").revoked is True
    assert store.revoke_if_active("a") is RevokeResult.ALREADY_REVOKED


def test_compare_and_set_has_a_single_winner():
    store = InMemoryRefreshTokenStore()
    store.create(_record("a"))
    barrier = threading.Barrier(8)
    results: list[RevokeResult] = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        outcome = store.revoke_if_active("a")
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(RevokeResult.REVOKED) == 1
    assert results.count(RevokeResult.ALREADY_REVOKED) == 7


def test_revoke_all_only_touches_that_user():
    store = InMemoryRefreshTokenStore()
    store.create(_record("a"))
    store.create(_record("b", user_id="u2"))

    store.revoke_all_for_user("u1")
    store.revoke_all_for_user("nobody")

    assert store.find_active_by_user("u1") == []
    assert [r.id for r in store.find_active_by_user("u2")] == ["b"]
