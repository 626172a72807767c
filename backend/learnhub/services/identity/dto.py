"""
DTOs for IdentityService.

Accounts leave the service layer as :class:`UserOut`, which never carries the
password hash.
"""

from __future__ import annotations

from dataclasses import dataclass

from learnhub.services._shared.ports.user_directory import AccountIdentity


@dataclass(frozen=True, slots=True)
class RolesUpdateIn:
    """
    Input DTO for replacing an account's roles.

    :param user_id: Target account.
    :type user_id: str
    :param roles: New role values; unknown values are rejected.
    :type roles: tuple[str, ...]
    """

    user_id: str
    roles: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Output DTO representing public-safe account data.

    :param id: Account identifier.
    :type id: str
    :param email: Email address.
    :type email: str
    :param name: Display name.
    :type name: str
    :param provider: ``local`` or ``google``.
    :type provider: str
    :param roles: Role values, sorted.
    :type roles: tuple[str, ...]
    """

    id: str
    email: str
    name: str
    provider: str
    roles: tuple[str, ...]

    @classmethod
    def from_account(cls, account: AccountIdentity) -> UserOut:
        return cls(
            id=account.id,
            email=account.email,
            name=account.name,
            provider=account.provider.value,
            roles=tuple(sorted(role.value for role in account.roles)),
        )
