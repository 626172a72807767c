from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum, auto
from typing import Protocol


class RevokeResult(Enum):
    """Outcome of a conditional (compare-and-set) revocation."""

    REVOKED = auto()
    ALREADY_REVOKED = auto()
    NOT_FOUND = auto()


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Server-side representation of an issued refresh token.

    :ivar id: Opaque identifier; also the first segment of the raw token.
    :ivar user_id: Owning account id (back-reference only).
    :ivar token_hash: One-way hash of the raw token.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar user_agent: Client user agent at issuance (informational).
    :ivar ip: Client address at issuance (informational).
    :ivar revoked: Monotonic revocation flag.
    :ivar created_at: Creation timestamp (UTC).
    :ivar updated_at: Last modification timestamp (UTC).
    """

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    user_agent: str | None = None
    ip: str | None = None
    revoked: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or datetime.now(UTC))

    def is_valid(self, now: datetime | None = None) -> bool:
        return not self.revoked and not self.is_expired(now)


class RefreshTokenStore(Protocol):
    """
    Persistence contract for refresh token records.

    Every method may raise :class:`~learnhub.services._shared.errors.StoreUnavailableError`;
    callers propagate it.
    """

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """Persist a brand-new record in a single write, hash included."""

    def find_by_id(self, token_id: str) -> RefreshTokenRecord | None: ...

    def find_active_by_user(self, user_id: str) -> list[RefreshTokenRecord]:
        """Return the user's non-revoked records. Expired ones are included."""

    def revoke_by_id(self, token_id: str) -> RefreshTokenRecord | None:
        """Set ``revoked`` and return the updated record, or ``None`` if absent."""

    def revoke_if_active(self, token_id: str) -> RevokeResult:
        """
        Atomically flip ``revoked`` from False to True.

        Only one of several concurrent callers observes ``REVOKED``.
        """

    def revoke_all_for_user(self, user_id: str) -> None:
        """Set ``revoked`` on every record of the user."""

    def update_hash(self, token_id: str, new_hash: str) -> None: ...


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store.

    .. note::
       Uses a threading lock so compare-and-set revocation is atomic across
       the threads of a unit test.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, RefreshTokenRecord] = {}
        self._by_user: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        now = self._now()
        stored = replace(
            record,
            created_at=record.created_at or now,
            updated_at=record.updated_at or now,
        )
        with self._lock:
            if stored.id in self._by_id:
                raise ValueError(f"Duplicate refresh token id: {stored.id}")
            self._by_id[stored.id] = stored
            self._by_user.setdefault(stored.user_id, set()).add(stored.id)
        return stored

    def find_by_id(self, token_id: str) -> RefreshTokenRecord | None:
        return self._by_id.get(token_id)

    def find_active_by_user(self, user_id: str) -> list[RefreshTokenRecord]:
        with self._lock:
            records = [self._by_id[j] for j in self._by_user.get(user_id, set())]
        active = [r for r in records if not r.revoked]
        return sorted(active, key=lambda r: (r.created_at or r.expires_at, r.id))

    def _revoke_locked(self, token_id: str) -> RefreshTokenRecord:
        updated = replace(self._by_id[token_id], revoked=True, updated_at=self._now())
        self._by_id[token_id] = updated
        return updated

    def revoke_by_id(self, token_id: str) -> RefreshTokenRecord | None:
        with self._lock:
            if token_id not in self._by_id:
                return None
            if self._by_id[token_id].revoked:
                return self._by_id[token_id]
            return self._revoke_locked(token_id)

    def revoke_if_active(self, token_id: str) -> RevokeResult:
        with self._lock:
            current = self._by_id.get(token_id)
            if current is None:
                return RevokeResult.NOT_FOUND
            if current.revoked:
                return RevokeResult.ALREADY_REVOKED
            self._revoke_locked(token_id)
            return RevokeResult.REVOKED

    def revoke_all_for_user(self, user_id: str) -> None:
        with self._lock:
            for token_id in self._by_user.get(user_id, set()):
                if not self._by_id[token_id].revoked:
                    self._revoke_locked(token_id)

    def update_hash(self, token_id: str, new_hash: str) -> None:
        with self._lock:
            current = self._by_id.get(token_id)
            if current is None:
                return
            self._by_id[token_id] = replace(current, token_hash=new_hash, updated_at=self._now())
