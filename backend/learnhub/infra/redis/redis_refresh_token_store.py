# learnhub/infra/redis/redis_refresh_token_store.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import wraps
from typing import Any, TypeVar

import redis  # type: ignore[import-untyped]

from learnhub.services._shared.errors import StoreUnavailableError
from learnhub.services._shared.ports import RefreshTokenRecord, RefreshTokenStore, RevokeResult

T = TypeVar("T")


def _unavailable_on_redis_error(fn: Callable[..., T]) -> Callable[..., T]:
    """Surface connection/protocol failures as :class:`StoreUnavailableError`."""

    @wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except redis.RedisError as exc:
            raise StoreUnavailableError(str(exc)) from exc

    return wrapper


def _b(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    Layout
    ------
    - ``rt:{id}``: hash with the record fields; timestamps as epoch seconds.
    - ``rt:u:{user_id}``: set of the user's record ids. Members are never
      removed, since records are never deleted.

    Records carry no Redis TTL; they outlive their expiry so that reuse of an
    expired-then-revoked token is still detected.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token_id: str) -> str:
        return f"rt:{token_id}"

    @staticmethod
    def _ku(user_id: str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> str:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return f"{dt.timestamp():.6f}"

    @staticmethod
    def _from_ts(raw: bytes | str | None) -> datetime | None:
        text = _b(raw)
        return datetime.fromtimestamp(float(text), tz=UTC) if text else None

    def _to_record(self, token_id: str, h: dict[bytes, bytes]) -> RefreshTokenRecord:
        try:
            expires_at = self._from_ts(h.get(b"expires_at"))
        except ValueError as exc:
            raise StoreUnavailableError(f"Corrupt refresh token record: {token_id}") from exc
        if expires_at is None:
            raise StoreUnavailableError(f"Corrupt refresh token record: {token_id}")
        return RefreshTokenRecord(
            id=token_id,
            user_id=_b(h.get(b"user_id")),
            token_hash=_b(h.get(b"token_hash")),
            expires_at=expires_at,
            user_agent=_b(h.get(b"user_agent")) or None,
            ip=_b(h.get(b"ip")) or None,
            revoked=_b(h.get(b"revoked"), "0") == "1",
            created_at=self._from_ts(h.get(b"created_at")),
            updated_at=self._from_ts(h.get(b"updated_at")),
        )

    # -------------------- API ------------------------

    @_unavailable_on_redis_error
    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """
        Insert the record and index it under its user in one transaction.

        :raises ValueError: If a record with the same id already exists.
        """
        now = datetime.now(UTC)
        created = record.created_at or now
        mapping = {
            "user_id": record.user_id,
            "token_hash": record.token_hash,
            "expires_at": self._to_ts(record.expires_at),
            "revoked": "1" if record.revoked else "0",
            "created_at": self._to_ts(created),
            "updated_at": self._to_ts(record.updated_at or created),
        }
        if record.user_agent:
            mapping["user_agent"] = record.user_agent
        if record.ip:
            mapping["ip"] = record.ip

        key = self._k(record.id)
        with self.r.pipeline() as p:
            p.watch(key)
            if p.exists(key):
                p.unwatch()
                raise ValueError(f"Duplicate refresh token id: {record.id}")
            p.multi()
            p.hset(key, mapping=mapping)
            p.sadd(self._ku(record.user_id), record.id)
            p.execute()

        return self.find_by_id(record.id)  # type: ignore[return-value]

    @_unavailable_on_redis_error
    def find_by_id(self, token_id: str) -> RefreshTokenRecord | None:
        h = self.r.hgetall(self._k(token_id))
        if not h:
            return None
        return self._to_record(token_id, h)

    @_unavailable_on_redis_error
    def find_active_by_user(self, user_id: str) -> list[RefreshTokenRecord]:
        members = sorted(_b(j) for j in self.r.smembers(self._ku(user_id)))
        out: list[RefreshTokenRecord] = []
        for token_id in members:
            rec = self.find_by_id(token_id)
            if rec is not None and not rec.revoked:
                out.append(rec)
        return sorted(out, key=lambda r: (r.created_at or r.expires_at, r.id))

    @_unavailable_on_redis_error
    def revoke_by_id(self, token_id: str) -> RefreshTokenRecord | None:
        key = self._k(token_id)
        if not self.r.exists(key):
            return None
        self.r.hset(
            key,
            mapping={"revoked": "1", "updated_at": self._to_ts(datetime.now(UTC))},
        )
        return self.find_by_id(token_id)

    @_unavailable_on_redis_error
    def revoke_if_active(self, token_id: str) -> RevokeResult:
        """
        Flip ``revoked`` 0 → 1 with WATCH/MULTI/EXEC.

        A concurrent write to the record aborts the transaction; the loop
        then re-reads and reports ``ALREADY_REVOKED`` to the slower caller.
        """
        key = self._k(token_id)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    state = p.hget(key, "revoked")
                    if state is None:
                        p.unwatch()
                        return RevokeResult.NOT_FOUND
                    if _b(state) == "1":
                        p.unwatch()
                        return RevokeResult.ALREADY_REVOKED
                    p.multi()
                    p.hset(
                        key,
                        mapping={"revoked": "1", "updated_at": self._to_ts(datetime.now(UTC))},
                    )
                    p.execute()
                    return RevokeResult.REVOKED
            except redis.WatchError:
                # Concurrent modification detected; retry loop
                continue

    @_unavailable_on_redis_error
    def revoke_all_for_user(self, user_id: str) -> None:
        ids = [_b(j) for j in self.r.smembers(self._ku(user_id))]
        if not ids:
            return
        now = self._to_ts(datetime.now(UTC))
        pipe = self.r.pipeline(transaction=True)
        for token_id in ids:
            pipe.hset(self._k(token_id), mapping={"revoked": "1", "updated_at": now})
        pipe.execute()

    @_unavailable_on_redis_error
    def update_hash(self, token_id: str, new_hash: str) -> None:
        key = self._k(token_id)
        if not self.r.exists(key):
            return
        self.r.hset(
            key,
            mapping={"token_hash": new_hash, "updated_at": self._to_ts(datetime.now(UTC))},
        )
