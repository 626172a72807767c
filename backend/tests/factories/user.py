"""Factory Boy definition for :class:`learnhub.models.user.User`."""

from __future__ import annotations

import factory
from werkzeug.security import generate_password_hash

from learnhub.models.enums import AuthProvider, UserRole
from learnhub.models.user import User
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


class UserFactory(BaseFactory):
    """
    Build persisted local accounts.

    Pass ``password="..."`` to choose the raw password; the stored value is
    always a hash.
    """

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Faker("name")
    provider = AuthProvider.LOCAL.value
    roles = factory.LazyFunction(lambda: [UserRole.STUDENT.value])

    class Params:
        password = None

    @factory.lazy_attribute
    def password_hash(self):
        return generate_password_hash(self.password or DEFAULT_PASSWORD, method="pbkdf2:sha256:1000")


class OAuthUserFactory(UserFactory):
    """Account created through Google sign-in (no password)."""

    provider = AuthProvider.GOOGLE.value
    provider_id = factory.Sequence(lambda n: f"google-{n}")
    password_hash = None
