"""Refresh token repository."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select, update

from learnhub.models.refresh_token import RefreshToken
from learnhub.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken` rows.

    Revocation methods issue single ``UPDATE`` statements so the database,
    not the ORM identity map, decides which caller flipped the flag.
    """

    model = RefreshToken

    def _sortable_fields(self):
        return {
            "created_at": RefreshToken.created_at,
            "expires_at": RefreshToken.expires_at,
        }

    def _filterable_fields(self):
        return {
            "user_id": RefreshToken.user_id,
            "revoked": RefreshToken.revoked,
        }

    def active_for_user(self, user_id: str) -> list[RefreshToken]:
        return self.find_all(sort=["created_at"], user_id=user_id, revoked=False)

    def mark_revoked(self, token_id: str, *, only_if_active: bool = False) -> int:
        """Set ``revoked`` on one row.

        :param only_if_active: Restrict the update to rows still active, which
            makes the statement a compare-and-set.
        :returns: Number of rows changed.
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id)
            .values(revoked=True, updated_at=datetime.now(UTC))
        )
        if only_if_active:
            stmt = stmt.where(RefreshToken.revoked.is_(False))
        result = self.session.execute(stmt.execution_options(synchronize_session=False))
        return int(result.rowcount or 0)

    def mark_all_revoked(self, user_id: str) -> int:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
            .values(revoked=True, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def set_hash(self, token_id: str, new_hash: str) -> int:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id)
            .values(token_hash=new_hash, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)

    def exists_id(self, token_id: str) -> bool:
        stmt = select(RefreshToken.id).where(RefreshToken.id == token_id)
        return self.session.execute(stmt).first() is not None
