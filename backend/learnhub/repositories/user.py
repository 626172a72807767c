"""User repository for account lookup and provisioning."""

from __future__ import annotations

from collections.abc import Iterable
from typing import cast

from sqlalchemy import select

from learnhub.models.enums import UserRole
from learnhub.models.user import User
from learnhub.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never hashes passwords or issues tokens; services do.
    """

    model = User

    def _sortable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "name": User.name,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {
            "email": User.email,
            "provider": User.provider,
        }

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :returns: User instance or ``None`` when not found.
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def set_roles(self, user: User, roles: Iterable[UserRole | str]) -> User:
        """Replace the roles of ``user`` (validated by the model) and flush."""
        user.roles = [getattr(r, "value", r) for r in roles]
        self.flush()
        return user
