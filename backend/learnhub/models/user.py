"""Account model backing the user directory."""

from __future__ import annotations

from sqlalchemy import JSON, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from learnhub.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .enums import AuthProvider, UserRole


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity for students, tutors, parents and staff.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    name : str
        Display name.
    password_hash : str | None
        Credential hash; ``None`` for accounts that only sign in through OAuth.
    provider : str
        :class:`~learnhub.models.enums.AuthProvider` value.
    provider_id : str | None
        Subject identifier assigned by the OAuth provider.
    avatar_url : str | None
        Optional picture supplied by the OAuth provider.
    roles : list[str]
        :class:`~learnhub.models.enums.UserRole` values.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    provider: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AuthProvider.LOCAL.value
    )
    provider_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        Index("ix_users_email", "email"),
    )

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("roles")
    def _validate_roles(self, key: str, value: list[str]) -> list[str]:
        """Reject role strings that are not :class:`UserRole` values."""
        known = {role.value for role in UserRole}
        normalized = [getattr(v, "value", v) for v in value or []]
        unknown = [v for v in normalized if v not in known]
        if unknown:
            raise ValueError(f"Unknown roles: {', '.join(sorted(unknown))}")
        return sorted(set(normalized))
