from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, replace
from itertools import count
from typing import Protocol

from learnhub.models.enums import AuthProvider, UserRole
from learnhub.services._shared.errors import DuplicateAccountError


@dataclass(frozen=True, slots=True)
class AccountIdentity:
    """
    Read-only view of an account as seen by the session services.

    :ivar id: Account id (string form).
    :ivar email: Normalized login email.
    :ivar name: Display name.
    :ivar password_hash: Credential hash, ``None`` for OAuth-only accounts.
    :ivar provider: How the account signs in.
    :ivar roles: Current roles.
    """

    id: str
    email: str
    name: str
    password_hash: str | None
    provider: AuthProvider
    roles: frozenset[UserRole]


class UserDirectory(Protocol):
    """Lookup and provisioning of accounts."""

    def find_by_id(self, user_id: str) -> AccountIdentity | None: ...

    def find_by_email(self, email: str) -> AccountIdentity | None: ...

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
        """
        Create an account.

        :raises DuplicateAccountError: If the email is taken.
        """

    def update_roles(self, user_id: str, roles: Iterable[UserRole]) -> AccountIdentity | None:
        """Replace the account's roles; ``None`` if the account does not exist."""

    def list_accounts(self) -> list[AccountIdentity]: ...


class InMemoryUserDirectory(UserDirectory):
    """Dictionary-backed directory for unit tests."""

    def __init__(self) -> None:
        self._by_id: dict[str, AccountIdentity] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def find_by_id(self, user_id: str) -> AccountIdentity | None:
        return self._by_id.get(str(user_id))

    def find_by_email(self, email: str) -> AccountIdentity | None:
        wanted = email.strip().lower()
        return next((a for a in self._by_id.values() if a.email == wanted), None)

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
        with self._lock:
            if self.find_by_email(email) is not None:
                raise DuplicateAccountError(email)
            account = AccountIdentity(
                id=str(next(self._ids)),
                email=email.strip().lower(),
                name=name,
                password_hash=password_hash,
                provider=provider,
                roles=frozenset(roles),
            )
            self._by_id[account.id] = account
        return account

    def update_roles(self, user_id: str, roles: Iterable[UserRole]) -> AccountIdentity | None:
        with self._lock:
            current = self._by_id.get(str(user_id))
            if current is None:
                return None
            updated = replace(current, roles=frozenset(roles))
            self._by_id[updated.id] = updated
        return updated

    def delete(self, user_id: str) -> None:
        """Drop an account (tests simulate deleted users with it)."""
        self._by_id.pop(str(user_id), None)

    def list_accounts(self) -> list[AccountIdentity]:
        return sorted(self._by_id.values(), key=lambda a: int(a.id))
