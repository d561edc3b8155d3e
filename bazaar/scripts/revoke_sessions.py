"""Admin session reset CLI (backend-only, no UI).

Usage examples:
    flask revoke-sessions --account-id=3f2a... --reason="lost device"
    flask revoke-sessions --login-key=9876543210 --reason="ops reset"
    python -m bazaar.scripts.revoke_sessions --login-key=admin@example.com --reason="ops reset"
"""

from __future__ import annotations

import sys

import click
from flask.cli import with_appcontext

from bazaar.core.accounts.services import find_by_login_key
from bazaar.core.auth.constants import SESSION_SCOPE_ALL
from bazaar.core.auth.session_services import SessionManager
from bazaar.core.errors import BazaarError


@click.command("revoke-sessions")
@click.option("--account-id", type=str, help="Target account id")
@click.option("--login-key", type=str, help="Target login key (phone number or email)")
@click.option("--reason", required=True, help="Reason for reset (required)")
@click.option("--initiated-by", type=str, help="Admin account id initiating reset (optional)")
@with_appcontext
def revoke_sessions_command(account_id: str | None, login_key: str | None, reason: str, initiated_by: str | None):
    """Revoke every active session of an account and record auth.session.admin_reset."""
    reason_clean = (reason or "").strip()
    if not reason_clean:
        click.echo("--reason is required", err=True)
        raise click.Abort()
    if not account_id and not login_key:
        click.echo("Provide --account-id or --login-key", err=True)
        raise click.Abort()

    target_id = account_id
    if login_key and not target_id:
        account = find_by_login_key(login_key)
        if not account:
            click.echo("Account not found for the given login key", err=True)
            raise click.Abort()
        target_id = account.id

    try:
        result = SessionManager().admin_reset(
            target_id,
            session_scope=SESSION_SCOPE_ALL,
            reason=reason_clean,
            initiated_by_admin_id=initiated_by,
        )
    except BazaarError as exc:
        click.echo(exc.message, err=True)
        raise click.Abort()

    click.echo(
        f"admin_reset ok: account_id={target_id} reset_count={result['reset_count']} "
        f"scope={result['session_scope']} reason=\"{reason_clean}\""
    )


def main(argv: list[str] | None = None) -> int:
    """Entry point for python -m bazaar.scripts.revoke_sessions."""
    from bazaar import create_app

    app = create_app()
    with app.app_context():
        try:
            revoke_sessions_command.main(standalone_mode=False, args=argv)
        except SystemExit as exc:  # click may raise SystemExit
            return exc.code if isinstance(exc.code, int) else 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
