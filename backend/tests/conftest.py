"""Pytest fixtures for the LearnHub backend.

Unit tests of the services run against the in-memory ports and need no
application. Adapter, CLI and API tests get a fresh app per test backed by
an in-memory SQLite database whose tables are created and dropped around
each case.
"""

from __future__ import annotations

import os
from collections.abc import Generator

import pytest
from flask import Flask

from learnhub.core.config import TestingConfig
from learnhub.core.extensions import db as _db
from learnhub.factory import create_app
from learnhub.infra.security.werkzeug_credential_hasher import WerkzeugCredentialHasher
from learnhub.services._shared.ports import (
    InMemoryRefreshTokenStore,
    InMemoryUserDirectory,
    StubAccessTokenIssuer,
)
from learnhub.services.auth.service import AuthService
from learnhub.services.refresh_tokens.service import RefreshTokenService

# Cheap but real hash so unit tests stay fast
TEST_HASH_METHOD = "pbkdf2:sha256:1000"


# ------------------------------ Application ---------------------------------


@pytest.fixture()
def app() -> Generator[Flask, None, None]:
    """Create a Flask application configured for testing.

    Yields
    ------
    flask.Flask
        Application with :class:`TestingConfig`, inside an app context and
        with all tables created.
    """
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig, instance_relative_config=False)
    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(app: Flask):
    """Return the Flask-scoped session and wire Factory Boy to it."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(_db.session)
    yield _db.session
    SQLAlchemySession.set(None)


@pytest.fixture()
def client(app: Flask):
    """Return a test client bound to the application."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# ------------------------------ In-memory wiring ----------------------------


@pytest.fixture()
def hasher() -> WerkzeugCredentialHasher:
    return WerkzeugCredentialHasher(method=TEST_HASH_METHOD)


@pytest.fixture()
def token_store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture()
def access_tokens() -> StubAccessTokenIssuer:
    return StubAccessTokenIssuer()


@pytest.fixture()
def refresh_service(token_store, hasher, directory, access_tokens) -> RefreshTokenService:
    """RefreshTokenService wired to in-memory doubles."""
    return RefreshTokenService(
        store=token_store,
        hasher=hasher,
        users=directory,
        access_tokens=access_tokens,
    )


@pytest.fixture()
def auth_service(refresh_service, hasher, directory, access_tokens) -> AuthService:
    """AuthService sharing its collaborators with ``refresh_service``."""
    return AuthService(
        users=directory,
        hasher=hasher,
        access_tokens=access_tokens,
        refresh_tokens=refresh_service,
    )
