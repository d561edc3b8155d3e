"""CLI command registration."""

from __future__ import annotations

from bazaar.scripts.check_account_password import check_account_password_command
from bazaar.scripts.revoke_sessions import revoke_sessions_command
from bazaar.scripts.seed_superadmin import seed_superadmin_command
from bazaar.scripts.unlock_admins import unlock_admins_command


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(seed_superadmin_command)
    app.cli.add_command(unlock_admins_command)
    app.cli.add_command(revoke_sessions_command)
    app.cli.add_command(check_account_password_command)
