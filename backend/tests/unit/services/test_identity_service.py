# tests/unit/services/test_identity_service.py
from __future__ import annotations

import pytest

from learnhub.models.enums import AuthProvider, UserRole
from learnhub.services._shared.errors import NotFoundError, ServiceError
from learnhub.services.identity.dto import RolesUpdateIn, UserOut
from learnhub.services.identity.service import IdentityService


@pytest.fixture()
def service(directory) -> IdentityService:
    return IdentityService(users=directory)


@pytest.fixture()
def account(directory):
    return directory.create(
        email="sam@example.com",
        name="Sam",
        password_hash="hash",
        provider=AuthProvider.LOCAL,
        roles=[UserRole.LIMITED_ACCESS_USER],
    )


def test_get_profile(service, account):
    out = service.get_profile(account.id)
    assert out == UserOut(
        id=account.id,
        email="sam@example.com",
        name="Sam",
        provider="local",
        roles=("limited_access_user",),
    )


def test_get_profile_missing(service):
    with pytest.raises(NotFoundError):
        service.get_profile("999")


def test_list_users_in_id_order(service, directory, account):
    directory.create(
        email="zoe@example.com",
        name="Zoe",
        password_hash=None,
        provider=AuthProvider.GOOGLE,
        roles=[UserRole.STUDENT],
    )
    assert [u.email for u in service.list_users()] == ["sam@example.com", "zoe@example.com"]


def test_update_roles_replaces_set(service, directory, account):
    out = service.update_roles(RolesUpdateIn(user_id=account.id, roles=("tutor", "student")))

    assert out.roles == ("student", "tutor")
    assert directory.find_by_id(account.id).roles == frozenset({UserRole.STUDENT, UserRole.TUTOR})


@pytest.mark.parametrize("roles", [(), ("wizard",)])
def test_update_roles_rejects_bad_input(service, directory, account, roles):
    with pytest.raises(ServiceError):
        service.update_roles(RolesUpdateIn(user_id=account.id, roles=roles))
    assert directory.find_by_id(account.id).roles == frozenset({UserRole.LIMITED_ACCESS_USER})


def test_update_roles_unknown_user(service):
    with pytest.raises(NotFoundError):
        service.update_roles(RolesUpdateIn(user_id="404", roles=("student",)))
