"""Clear failed-login counters and lockouts on admin accounts.

Usage:
    flask unlock-admins
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext

from bazaar.core.accounts.services import unlock_admins


@click.command("unlock-admins")
@with_appcontext
def unlock_admins_command():
    """Reset lockout state for every admin and super admin."""
    count = unlock_admins()
    click.echo(f"unlocked {count} admin account(s)")
