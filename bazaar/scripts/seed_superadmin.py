"""Seed the first super admin account.

Usage:
    flask seed-superadmin --email admin@example.com --password secret123 --name "Super Admin"
    python -m bazaar.scripts.seed_superadmin --email admin@example.com --password secret123
"""

from __future__ import annotations

import sys

import click
from flask.cli import with_appcontext

from bazaar.core.accounts.services import register_account
from bazaar.core.auth.roles import Role
from bazaar.core.errors import BazaarError


@click.command("seed-superadmin")
@click.option("--email", required=True, help="Super admin email (used as the login key)")
@click.option("--password", required=True, help="Super admin password")
@click.option("--name", default="Super Admin", help="Display name")
@with_appcontext
def seed_superadmin_command(email: str, password: str, name: str):
    """Create a super admin through the regular registration path."""
    normalized = email.strip().lower()
    if len(password) < 8:
        click.echo("Password must be at least 8 characters", err=True)
        raise click.Abort()
    try:
        account = register_account(
            Role.SUPERADMIN,
            login_key=normalized,
            password=password,
            display_name=name,
            email=normalized,
        )
    except BazaarError as exc:
        click.echo(f"Could not seed super admin: {exc.message}", err=True)
        raise click.Abort()
    click.echo(f"Seeded super admin id={account.id} email={account.email}")


def main(argv: list[str] | None = None) -> int:
    """Entry point for python -m bazaar.scripts.seed_superadmin."""
    from bazaar import create_app

    app = create_app()
    with app.app_context():
        try:
            seed_superadmin_command.main(standalone_mode=False, args=argv)
        except SystemExit as exc:
            return exc.code if isinstance(exc.code, int) else 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
