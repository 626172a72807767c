"""Server-side record of an issued refresh token."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from learnhub.core.extensions import db

from .base import ReprMixin, TimestampMixin


class RefreshToken(ReprMixin, TimestampMixin, db.Model):
    """
    Hashed refresh token with provenance metadata.

    The primary key is generated by the service before the row is written and
    is the first dot-separated segment of the raw token handed to the client.
    Rows are soft-revoked only; cleanup of old rows is an operational task.
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    token_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_refresh_tokens_user_id_revoked", "user_id", "revoked"),
    )
