# learnhub/infra/sql/sqlalchemy_user_directory.py
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from learnhub.models.enums import AuthProvider, UserRole, parse_roles
from learnhub.models.user import User
from learnhub.services._shared.errors import (
    DuplicateAccountError,
    StoreUnavailableError,
    violates,
)
from learnhub.services._shared.ports import AccountIdentity, UserDirectory
from learnhub.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


def to_identity(user: User) -> AccountIdentity:
    """Project a :class:`User` row onto the read-only account view."""
    return AccountIdentity(
        id=str(user.id),
        email=user.email,
        name=user.name,
        password_hash=user.password_hash,
        provider=AuthProvider(user.provider),
        roles=parse_roles(user.roles),
    )


def _as_pk(user_id: str) -> int | None:
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None


class SQLAlchemyUserDirectory(UserDirectory):
    """
    :class:`UserDirectory` over the ``users`` table.

    Ids are exposed as strings; a non-numeric id simply finds nothing.
    """

    def find_by_id(self, user_id: str) -> AccountIdentity | None:
        pk = _as_pk(user_id)
        if pk is None:
            return None
        try:
            with SQLAlchemyReadOnlyUnitOfWork() as uow:
                user = uow.users.get(pk)
                return to_identity(user) if user else None
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(str(exc)) from exc

    def find_by_email(self, email: str) -> AccountIdentity | None:
        try:
            with SQLAlchemyReadOnlyUnitOfWork() as uow:
                user = uow.users.get_by_email(email)
                return to_identity(user) if user else None
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(str(exc)) from exc

    def create(
        self,
        *,
        email: str,
        name: str,
        password_hash: str | None,
        provider: AuthProvider,
        roles: Iterable[UserRole],
        provider_id: str | None = None,
        avatar_url: str | None = None,
    ) -> AccountIdentity:
        try:
            with SQLAlchemyUnitOfWork() as uow:
                user = uow.users.add(
                    User(
                        email=email,
                        name=name,
                        password_hash=password_hash,
                        provider=provider.value,
                        provider_id=provider_id,
                        avatar_url=avatar_url,
                        roles=[r.value for r in roles],
                    )
                )
                out = to_identity(user)
        except IntegrityError as exc:
            if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                raise DuplicateAccountError(email) from exc
            raise StoreUnavailableError(str(exc)) from exc
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(str(exc)) from exc
        return out

    def update_roles(self, user_id: str, roles: Iterable[UserRole]) -> AccountIdentity | None:
        pk = _as_pk(user_id)
        if pk is None:
            return None
        try:
            with SQLAlchemyUnitOfWork() as uow:
                user = uow.users.get(pk)
                if user is None:
                    return None
                uow.users.set_roles(user, roles)
                out = to_identity(user)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(str(exc)) from exc
        return out

    def list_accounts(self) -> list[AccountIdentity]:
        try:
            with SQLAlchemyReadOnlyUnitOfWork() as uow:
                return [to_identity(u) for u in uow.users.find_all(sort=["id"])]
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(str(exc)) from exc
