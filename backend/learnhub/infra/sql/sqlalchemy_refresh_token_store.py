# learnhub/infra/sql/sqlalchemy_refresh_token_store.py
from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from learnhub.models.base import as_utc
from learnhub.models.refresh_token import RefreshToken
from learnhub.services._shared.errors import StoreUnavailableError
from learnhub.services._shared.ports import RefreshTokenRecord, RefreshTokenStore, RevokeResult
from learnhub.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        expires_at=as_utc(row.expires_at),
        user_agent=row.user_agent,
        ip=row.ip,
        revoked=bool(row.revoked),
        created_at=as_utc(row.created_at) if row.created_at else None,
        updated_at=as_utc(row.updated_at) if row.updated_at else None,
    )


@dataclass(slots=True)
class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh token store.

    Every call runs in its own unit of work and commits before returning, so
    a revocation is visible to other workers as soon as the call completes.
    ``SQLAlchemyError`` surfaces as :class:`StoreUnavailableError`.

    :param session_factory: Returns the session to use; defaults to the
        Flask-scoped session.
    """

    session_factory: Callable[[], Session] | None = field(default=None)

    def _session(self) -> Session | None:
        return self.session_factory() if self.session_factory else None

    @contextmanager
    def _rw(self) -> Iterator[SQLAlchemyUnitOfWork]:
        try:
            with SQLAlchemyUnitOfWork(self._session()) as uow:
                yield uow
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(str(exc)) from exc

    @contextmanager
    def _ro(self) -> Iterator[SQLAlchemyReadOnlyUnitOfWork]:
        try:
            with SQLAlchemyReadOnlyUnitOfWork(self._session()) as uow:
                yield uow
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(str(exc)) from exc

    # -------------------- API ------------------------

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """
        Insert the row with its final hash.

        :raises ValueError: If a row with the same id already exists.
        """
        now = datetime.now(UTC)
        with self._rw() as uow:
            if uow.refresh_tokens.exists_id(record.id):
                raise ValueError(f"Duplicate refresh token id: {record.id}")
            row = uow.refresh_tokens.add(
                RefreshToken(
                    id=record.id,
                    user_id=record.user_id,
                    token_hash=record.token_hash,
                    user_agent=record.user_agent,
                    ip=record.ip,
                    revoked=record.revoked,
                    expires_at=record.expires_at,
                    created_at=record.created_at or now,
                    updated_at=record.updated_at or now,
                )
            )
            out = _to_record(row)
        return out

    def find_by_id(self, token_id: str) -> RefreshTokenRecord | None:
        with self._ro() as uow:
            row = uow.refresh_tokens.get(token_id)
            return _to_record(row) if row is not None else None

    def find_active_by_user(self, user_id: str) -> list[RefreshTokenRecord]:
        with self._ro() as uow:
            return [_to_record(r) for r in uow.refresh_tokens.active_for_user(user_id)]

    def revoke_by_id(self, token_id: str) -> RefreshTokenRecord | None:
        with self._rw() as uow:
            if not uow.refresh_tokens.mark_revoked(token_id):
                return None
        return self.find_by_id(token_id)

    def revoke_if_active(self, token_id: str) -> RevokeResult:
        """
        Conditional ``UPDATE ... WHERE revoked = false``.

        The row count tells whether this call won; a zero count is then
        disambiguated by checking existence.
        """
        with self._rw() as uow:
            changed = uow.refresh_tokens.mark_revoked(token_id, only_if_active=True)
            if changed:
                return RevokeResult.REVOKED
            exists = uow.refresh_tokens.exists_id(token_id)
        return RevokeResult.ALREADY_REVOKED if exists else RevokeResult.NOT_FOUND

    def revoke_all_for_user(self, user_id: str) -> None:
        with self._rw() as uow:
            uow.refresh_tokens.mark_all_revoked(user_id)

    def update_hash(self, token_id: str, new_hash: str) -> None:
        with self._rw() as uow:
            uow.refresh_tokens.set_hash(token_id, new_hash)
