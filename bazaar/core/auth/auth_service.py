"""Authentication service layer."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Union

from flask import current_app

from bazaar.core.accounts.models import Account
from bazaar.core.accounts.services import find_by_login_key, register_account
from bazaar.core.auth.constants import REVOKE_REASON_RELOGIN
from bazaar.core.auth.events import ACCOUNT_LOCKED, AUTH_LOGIN_FAILED
from bazaar.core.auth.password import burn_password_check, verify_password
from bazaar.core.auth.roles import SELF_REGISTER_ROLES, Role, authorize
from bazaar.core.auth.schemas import RegisterCustomerRequest, RegisterSellerRequest
from bazaar.core.auth.session_services import IssuedSession, SessionManager
from bazaar.core.errors import INVALID_CREDENTIALS, AuthenticationError, NotFoundError
from bazaar.core.events.event_service import log_event
from bazaar.extensions import db

logger = logging.getLogger(__name__)

RegisterPayload = Union[RegisterCustomerRequest, RegisterSellerRequest]


def register(role: Role, payload: RegisterPayload) -> Account:
    """Create a self-service account. Issuing a session is a separate step."""
    if role not in SELF_REGISTER_ROLES:
        raise NotFoundError("Unknown account type")
    return register_account(
        role,
        login_key=payload.login_key,
        password=payload.password,
        display_name=payload.name,
        email=payload.email,
        avatar=payload.avatar,
        address=getattr(payload, "address", None),
        zip_code=getattr(payload, "zip_code", None),
    )


def authenticate(role: Role, login_key: str, password: str) -> Account:
    """Return the account behind valid credentials for ``role``'s login route.

    Every failure raises the same AuthenticationError so callers cannot tell
    an unknown key from a wrong password or a wrong role.
    """
    account = find_by_login_key(login_key)
    if account is None:
        burn_password_check(password)
        _record_failure(role, None)
        raise AuthenticationError(INVALID_CREDENTIALS)

    now = datetime.utcnow()
    if account.role_enum.is_admin_kind and account.is_locked(now):
        burn_password_check(password)
        _record_failure(role, account)
        raise AuthenticationError(INVALID_CREDENTIALS)

    password_ok = verify_password(password, account.password_hash)
    if not password_ok:
        _register_bad_password(account, now)
    if not password_ok or not authorize(account.role, role) or not account.is_active:
        _record_failure(role, account)
        raise AuthenticationError(INVALID_CREDENTIALS)

    if account.failed_login_attempts or account.locked_until:
        account.failed_login_attempts = 0
        account.locked_until = None
    account.last_login_at = now
    return account


def login(
    role: Role,
    login_key: str,
    password: str,
    *,
    remember_me: bool = False,
    stale_token: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    sessions: Optional[SessionManager] = None,
) -> tuple[Account, IssuedSession]:
    """Verify credentials and issue a new session.

    A session token already presented by the client is revoked first so the
    caller always leaves with a fresh identifier.
    """
    account = authenticate(role, login_key, password)
    sessions = sessions or SessionManager()
    if stale_token:
        sessions.destroy_session(stale_token, reason=REVOKE_REASON_RELOGIN)
    issued = sessions.create_session(
        account, remember_me=remember_me, ip_address=ip_address, user_agent=user_agent
    )
    logger.info("login ok account=%s role=%s", account.id, account.role)
    return account, issued


def logout(token: Optional[str], sessions: Optional[SessionManager] = None) -> None:
    """Always succeeds; a missing or already-ended session is a no-op."""
    (sessions or SessionManager()).destroy_session(token)


# --- helpers ---


def _register_bad_password(account: Account, now: datetime) -> None:
    if not account.role_enum.is_admin_kind:
        return
    config = current_app.config
    if account.locked_until is not None and account.locked_until <= now:
        # An expired lock starts a fresh count.
        account.locked_until = None
        account.failed_login_attempts = 0
    account.failed_login_attempts = (account.failed_login_attempts or 0) + 1
    if account.failed_login_attempts >= int(config["ADMIN_MAX_LOGIN_ATTEMPTS"]):
        account.locked_until = now + timedelta(seconds=int(config["ADMIN_LOCKOUT_SECONDS"]))
        log_event(
            ACCOUNT_LOCKED,
            {"account_id": account.id, "locked_until": account.locked_until.isoformat()},
            account_id=account.id,
        )
        logger.warning("admin account locked id=%s until=%s", account.id, account.locked_until.isoformat())


def _record_failure(role: Role, account: Optional[Account]) -> None:
    account_id = account.id if account else None
    log_event(AUTH_LOGIN_FAILED, {"role": role.value, "account_id": account_id}, account_id=account_id)
    db.session.commit()
    logger.warning("login failed route=%s account=%s", role.value, account_id or "-")


__all__ = ["register", "authenticate", "login", "logout"]
