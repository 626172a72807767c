"""
IdentityService
===============

Read and administer accounts through the :class:`UserDirectory` port:
- Profile of the signed-in account
- Account listing for administrators
- Role replacement
"""

from __future__ import annotations

import logging

from learnhub.models.enums import UserRole
from learnhub.services._shared.base import BaseService
from learnhub.services._shared.errors import NotFoundError, ServiceError
from learnhub.services._shared.ports.user_directory import UserDirectory
from learnhub.services.identity.dto import RolesUpdateIn, UserOut

log = logging.getLogger(__name__)


class IdentityService(BaseService):
    """
    Application service for account profiles and roles.

    Role changes take effect on the account's next access token, which is
    minted at login or at the next refresh from the directory's current
    roles.
    """

    def __init__(self, *, users: UserDirectory, ctx=None) -> None:
        super().__init__(ctx=ctx)
        self.users = users

    def get_profile(self, user_id: str) -> UserOut:
        """
        :raises NotFoundError: If the account does not exist.
        """
        account = self.users.find_by_id(str(user_id))
        if account is None:
            raise NotFoundError("User", user_id)
        return UserOut.from_account(account)

    def list_users(self) -> list[UserOut]:
        return [UserOut.from_account(a) for a in self.users.list_accounts()]

    def update_roles(self, dto: RolesUpdateIn) -> UserOut:
        """
        Replace the roles of an account.

        :param dto: Target account and new role values.
        :returns: Updated account.
        :raises ServiceError: If the list is empty or names an unknown role.
        :raises NotFoundError: If the account does not exist.
        """
        known = {role.value for role in UserRole}
        unknown = sorted(set(dto.roles) - known)
        if unknown:
            raise ServiceError(f"Unknown roles: {', '.join(unknown)}")
        if not dto.roles:
            raise ServiceError("An account needs at least one role")

        updated = self.users.update_roles(str(dto.user_id), [UserRole(r) for r in dto.roles])
        if updated is None:
            raise NotFoundError("User", dto.user_id)

        log.info(
            "user.roles_updated",
            extra={"user_id": updated.id, "operation": "update_roles"},
        )
        return UserOut.from_account(updated)
