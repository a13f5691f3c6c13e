"""Flask CLI commands for bootstrapping the database."""

from __future__ import annotations

import logging
import secrets

import click
from flask import current_app
from flask.cli import with_appcontext

from memberhub.models.user import User, UserRole
from memberhub.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


def seed_admin(*, email: str, password: str | None, name: str) -> tuple[User | None, str | None]:
    """Create the initial SUPER_ADMIN unless an account already uses ``email``.

    :returns: ``(user, generated_password)``; ``user`` is ``None`` when the
        email already exists. A password is generated (and returned) only when
        none was supplied, and the account must change it at first login.
    """
    generated = None if password else secrets.token_urlsafe(12)
    with SQLAlchemyUnitOfWork() as uow:
        if uow.users.exists_by_email(email):
            return None, None
        user = User(
            email=email,
            name=name,
            role=UserRole.SUPER_ADMIN,
            must_change_password=generated is not None,
        )
        user.password = password or generated
        uow.users.add(user)
    return user, generated


@click.group("seed")
def seed_cli() -> None:
    """Collection of database seeding commands."""


@seed_cli.command("admin")
@click.option("--email", default=None, help="Admin email (defaults to SEED_ADMIN_EMAIL).")
@click.option("--password", default=None, help="Admin password (defaults to SEED_ADMIN_PASSWORD).")
@click.option("--name", default="Super Admin", show_default=True)
@with_appcontext
def admin_command(email: str | None, password: str | None, name: str) -> None:
    """Create the initial SUPER_ADMIN account (idempotent)."""
    config = current_app.config
    email = (email or config.get("SEED_ADMIN_EMAIL") or "").strip().lower()
    if not email:
        raise click.UsageError("An admin email is required (--email or SEED_ADMIN_EMAIL).")
    password = password or config.get("SEED_ADMIN_PASSWORD")

    user, generated = seed_admin(email=email, password=password, name=name)
    if user is None:
        click.echo(f"Admin {email} already exists; nothing to do.")
        return
    LOGGER.info("seeded super admin", extra={"event": "seed.admin"})
    click.echo(f"Created SUPER_ADMIN {email}")
    if generated:
        click.echo(f"Temporary password: {generated}")
