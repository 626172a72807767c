# tests/integration/test_cli_users.py
from learnhub.infra.sql.sqlalchemy_user_directory import SQLAlchemyUserDirectory
from learnhub.models.enums import UserRole
from tests.factories.user import UserFactory


def test_create_admin(app, session):
    runner = app.test_cli_runner()

    result = runner.invoke(
        args=["users", "create-admin", "Root@Example.com", "--name", "Root", "--password", "supersecret"]
    )

    assert result.exit_code == 0, result.output
    assert "Created super admin root@example.com" in result.output
    account = SQLAlchemyUserDirectory().find_by_email("root@example.com")
    assert account.roles == frozenset({UserRole.SUPER_ADMIN})
    assert account.password_hash != "supersecret"


def test_create_admin_rejects_short_password(app, session):
    result = app.test_cli_runner().invoke(args=["users", "create-admin", "a@example.com", "--password", "short"])

    assert result.exit_code != 0
    assert "at least 8 characters" in result.output


def test_create_admin_duplicate_email(app, session):
    UserFactory(email="taken@example.com")

    result = app.test_cli_runner().invoke(
        args=["users", "create-admin", "taken@example.com", "--password", "supersecret"]
    )

    assert result.exit_code == 1
    assert "already exists" in result.output
