# tests/unit/models/test_model_user.py
import pytest
from sqlalchemy.exc import IntegrityError

from learnhub.models.enums import UserRole, parse_roles
from learnhub.models.user import User
from tests.factories.user import UserFactory


def test_email_is_normalized():
    user = User(email="  Mixed.Case@Example.ORG ", name="M")
    assert user.email == "mixed.case@example.org"


@pytest.mark.parametrize("email", ["", "no-at-sign", "user@localhost"])
def test_invalid_email_rejected(email):
    with pytest.raises(ValueError):
        User(email=email, name="X")


def test_roles_are_deduplicated_and_sorted():
    user = User(email="r@example.com", name="R", roles=["student", UserRole.ADMIN, "student"])
    assert user.roles == ["admin", "student"]


def test_unknown_role_rejected():
    with pytest.raises(ValueError, match="Unknown roles: wizard"):
        User(email="r@example.com", name="R", roles=["wizard"])


def test_parse_roles_drops_unknown_values():
    assert parse_roles(["admin", "ghost", UserRole.TUTOR]) == frozenset({UserRole.ADMIN, UserRole.TUTOR})
    assert parse_roles(None) == frozenset()


def test_email_is_unique(session):
    UserFactory(email="dup@example.com")
    session.add(User(email="DUP@example.com", name="Other", roles=[]))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()


def test_timestamps_are_set_on_insert(session):
    user = UserFactory()
    assert user.created_at is not None
    assert user.updated_at is not None
