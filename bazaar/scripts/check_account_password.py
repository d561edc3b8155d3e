"""Utility CLI to verify an account's password hash.

Usage:
    flask check-account-password --login-key=9876543210 --password="secret"
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from bazaar.core.accounts.services import find_by_login_key
from bazaar.core.auth.password import verify_password


@click.command("check-account-password")
@click.option("--login-key", required=True, help="Phone number or email of the account")
@click.option("--password", required=True, help="Plaintext password to verify")
@with_appcontext
def check_account_password_command(login_key: str, password: str):
    """Verify an account's stored password hash against provided plaintext."""
    account = find_by_login_key(login_key)
    if not account:
        click.echo("Account not found", err=True)
        raise click.Abort()

    is_valid = verify_password(password, account.password_hash)
    click.echo(f"account_id={account.id} role={account.role} status={account.status}")
    click.echo(f"password_valid={is_valid}")
