"""Enumerations shared by the account and session models."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """
    Roles an account can hold.

    Values are persisted verbatim in ``users.roles`` and embedded in access
    token claims, so renaming a member is a data migration.
    """

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    STUDENT = "student"
    TUTOR = "tutor"
    PARENT = "parent"
    LIMITED_ACCESS_USER = "limited_access_user"


class AuthProvider(str, Enum):
    """How an account signs in."""

    LOCAL = "local"
    GOOGLE = "google"


#: Role given to accounts created through local registration.
DEFAULT_LOCAL_ROLE = UserRole.LIMITED_ACCESS_USER

#: Role given to accounts created on first OAuth login.
DEFAULT_OAUTH_ROLE = UserRole.STUDENT


def parse_roles(values) -> frozenset[UserRole]:
    """
    Convert stored or claimed role strings into :class:`UserRole` members.

    Unknown values are dropped so that a stale claim can never grant a role
    the system no longer defines.

    :param values: Iterable of role strings (or members).
    :returns: Known roles only.
    :rtype: frozenset[UserRole]
    """
    known = {role.value: role for role in UserRole}
    parsed: set[UserRole] = set()
    for value in values or ():
        key = value.value if isinstance(value, UserRole) else str(value)
        if key in known:
            parsed.add(known[key])
    return frozenset(parsed)
