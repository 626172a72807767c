"""Flask CLI commands for account administration."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from learnhub.infra.security.werkzeug_credential_hasher import WerkzeugCredentialHasher
from learnhub.infra.sql.sqlalchemy_user_directory import SQLAlchemyUserDirectory
from learnhub.models.enums import AuthProvider, UserRole
from learnhub.services._shared.errors import DuplicateAccountError

LOGGER = logging.getLogger(__name__)


@click.group("users")
def users_cli() -> None:
    """Account administration commands."""


@users_cli.command("create-admin")
@click.argument("email")
@click.option("--name", default="Administrator", show_default=True, help="Display name.")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password (prompted when omitted).",
)
@with_appcontext
def create_admin(email: str, name: str, password: str) -> None:
    """Create a local super-admin account for EMAIL."""
    if len(password) < 8:
        raise click.BadParameter("must be at least 8 characters", param_hint="--password")

    hasher = WerkzeugCredentialHasher(method=current_app.config.get("PASSWORD_HASH_METHOD", "scrypt"))
    try:
        account = SQLAlchemyUserDirectory().create(
            email=email,
            name=name,
            password_hash=hasher.hash(password),
            provider=AuthProvider.LOCAL,
            roles=[UserRole.SUPER_ADMIN],
        )
    except DuplicateAccountError as exc:
        raise click.ClickException(f"An account for {exc.email} already exists.") from exc

    LOGGER.info("user.admin_created", extra={"user_id": account.id, "operation": "create_admin"})
    click.echo(f"Created super admin {account.email} (id={account.id}).")
