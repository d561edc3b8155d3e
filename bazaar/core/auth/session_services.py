"""Session lifecycle: issue, resolve, extend and revoke server-side sessions."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from flask import current_app

from bazaar.core.accounts.models import Account
from bazaar.core.auth.constants import (
    REVOKE_REASON_LOGOUT,
    SESSION_SCOPE_ALL,
    SESSION_SCOPE_SINGLE,
    SESSION_STATE_ABSENT,
    SESSION_STATE_ACTIVE,
    SESSION_STATE_EXPIRED,
    SESSION_STATE_REVOKED,
)
from bazaar.core.auth.events import AUTH_SESSION_ADMIN_RESET, AUTH_SESSION_CREATED, AUTH_SESSION_REVOKED
from bazaar.core.auth.models import AuthSession
from bazaar.core.auth.roles import Role
from bazaar.core.auth.session_repository import SessionRepository, hash_token
from bazaar.core.errors import NotFoundError, ValidationError
from bazaar.core.events.event_service import log_event
from bazaar.extensions import db

logger = logging.getLogger(__name__)


@dataclass
class IssuedSession:
    token: str
    session: AuthSession

    @property
    def expires_at(self) -> datetime:
        return self.session.expires_at


@dataclass
class SessionResolution:
    state: str
    account: Optional[Account] = None
    session: Optional[AuthSession] = None

    @property
    def is_active(self) -> bool:
        return self.state == SESSION_STATE_ACTIVE

    @property
    def role(self) -> Optional[Role]:
        return Role(self.session.role) if self.is_active and self.session else None


def session_ttl_seconds(role: Role | str, remember_me: bool = False) -> int:
    role = Role(role)
    config = current_app.config
    if role.is_admin_kind:
        key = "ADMIN_SESSION_REMEMBER_TTL_SECONDS" if remember_me else "ADMIN_SESSION_TTL_SECONDS"
    else:
        key = "SESSION_REMEMBER_TTL_SECONDS" if remember_me else "SESSION_TTL_SECONDS"
    return int(config[key])


class SessionManager:
    """Lifecycle operations for sessions.

    Every state change commits; a request that resolves a session never sees
    another request's uncommitted work.
    """

    def __init__(self, repository: Optional[SessionRepository] = None):
        self.repository = repository or SessionRepository()

    def create_session(
        self,
        account: Account,
        *,
        remember_me: bool = False,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> IssuedSession:
        """Issue a fresh token bound to ``account`` and its current role."""
        raw = secrets.token_urlsafe(32)
        ttl = session_ttl_seconds(account.role, remember_me)
        now = datetime.utcnow()
        record = self.repository.add(
            AuthSession(
                token_hash=hash_token(raw),
                account_id=account.id,
                role=account.role,
                lifecycle_state=SESSION_STATE_ACTIVE,
                issued_at=now,
                last_seen_at=now,
                expires_at=now + timedelta(seconds=ttl),
                ttl_seconds=ttl,
                remember_me=remember_me,
                ip_address=ip_address,
                user_agent=(user_agent or "")[:255] or None,
            )
        )
        log_event(
            AUTH_SESSION_CREATED,
            {
                "session_id": record.id,
                "account_id": account.id,
                "role": account.role,
                "expires_at": record.expires_at.isoformat(),
            },
            account_id=account.id,
        )
        db.session.commit()
        logger.info("session issued id=%s account=%s role=%s", record.id, account.id, account.role)
        return IssuedSession(token=raw, session=record)

    def resolve_session(self, token: Optional[str], *, touch: bool = True) -> SessionResolution:
        """Map a cookie value onto a live (account, role) pair.

        The account is re-read on every call; deactivation, lockout or a role
        change since issuance resolves to absent.
        """
        record = self.repository.get_by_token(token) if token else None
        if record is None:
            return SessionResolution(SESSION_STATE_ABSENT)
        if record.lifecycle_state == SESSION_STATE_REVOKED:
            return SessionResolution(SESSION_STATE_REVOKED, session=record)

        now = datetime.utcnow()
        if record.lifecycle_state == SESSION_STATE_EXPIRED or record.is_expired(now):
            if record.lifecycle_state != SESSION_STATE_EXPIRED:
                record.lifecycle_state = SESSION_STATE_EXPIRED
                db.session.commit()
            return SessionResolution(SESSION_STATE_EXPIRED, session=record)

        account = db.session.get(Account, record.account_id)
        if account is None or not account.is_active or account.is_locked(now) or account.role != record.role:
            return SessionResolution(SESSION_STATE_ABSENT, session=record)

        if touch:
            record.last_seen_at = now
            if current_app.config.get("SESSION_SLIDING_EXPIRATION", True):
                record.expires_at = now + timedelta(seconds=record.ttl_seconds)
            db.session.commit()
        return SessionResolution(SESSION_STATE_ACTIVE, account=account, session=record)

    def extend_session(self, token: Optional[str]) -> Optional[AuthSession]:
        """Push expiry a full TTL forward. Returns None unless the session is active."""
        resolution = self.resolve_session(token, touch=False)
        if not resolution.is_active:
            return None
        record = resolution.session
        now = datetime.utcnow()
        record.last_seen_at = now
        record.expires_at = now + timedelta(seconds=record.ttl_seconds)
        db.session.commit()
        return record

    def destroy_session(self, token: Optional[str], reason: str = REVOKE_REASON_LOGOUT) -> bool:
        """Revoke the session behind ``token``. Unknown or already-ended sessions are a no-op."""
        record = self.repository.get_by_token(token) if token else None
        if record is None or not self.repository.revoke(record, reason):
            return False
        log_event(
            AUTH_SESSION_REVOKED,
            {"session_id": record.id, "account_id": record.account_id, "reason": reason},
            account_id=record.account_id,
        )
        db.session.commit()
        logger.info("session revoked id=%s account=%s reason=%s", record.id, record.account_id, reason)
        return True

    def revoke_account_sessions(
        self,
        account_id: str,
        *,
        reason: str,
        except_token: Optional[str] = None,
        commit: bool = True,
    ) -> int:
        """Revoke every active session of an account, optionally sparing the caller's own."""
        revoked = self.repository.revoke_for_account(
            account_id,
            reason=reason,
            except_token_hash=hash_token(except_token) if except_token else None,
        )
        for session_id in revoked:
            log_event(
                AUTH_SESSION_REVOKED,
                {"session_id": session_id, "account_id": account_id, "reason": reason},
                account_id=account_id,
            )
        if commit:
            db.session.commit()
        if revoked:
            logger.info("revoked %d session(s) account=%s reason=%s", len(revoked), account_id, reason)
        return len(revoked)

    def list_sessions(self, account_id: str, *, active_only: bool = False) -> list[AuthSession]:
        return self.repository.list_sessions(account_id, active_only=active_only)

    def admin_reset(
        self,
        account_id: str,
        *,
        session_scope: str = SESSION_SCOPE_ALL,
        session_id: Optional[int] = None,
        reason: Optional[str] = None,
        initiated_by_admin_id: Optional[str] = None,
    ) -> dict:
        """Admin-driven revocation of one or all sessions of an account."""
        account = db.session.get(Account, account_id)
        if not account:
            raise NotFoundError("Account not found")

        reason_clean = (reason or "").strip()
        if not reason_clean:
            raise ValidationError("A reason is required")
        if session_scope not in (SESSION_SCOPE_ALL, SESSION_SCOPE_SINGLE):
            raise ValidationError("session_scope must be 'all' or 'single'")
        if session_scope == SESSION_SCOPE_SINGLE and session_id is None:
            raise ValidationError("session_id is required for a single-session reset")

        revoked = self.repository.revoke_for_account(
            account_id,
            reason=f"admin_reset: {reason_clean}"[:64],
            session_id=session_id if session_scope == SESSION_SCOPE_SINGLE else None,
        )
        log_event(
            AUTH_SESSION_ADMIN_RESET,
            {
                "account_id": account_id,
                "session_scope": session_scope,
                "session_id": session_id,
                "reason": reason_clean,
                "initiated_by_admin_id": initiated_by_admin_id,
            },
            account_id=account_id,
        )
        db.session.commit()
        logger.warning(
            "admin session reset account=%s scope=%s count=%d by=%s",
            account_id,
            session_scope,
            len(revoked),
            initiated_by_admin_id,
        )
        return {
            "reset_count": len(revoked),
            "session_scope": session_scope,
            "session_id": session_id,
            "reset_at": datetime.utcnow().isoformat(),
        }


# Cookie helpers


def read_session_cookie(request) -> Optional[str]:
    return request.cookies.get(current_app.config["AUTH_COOKIE_NAME"]) or None


def set_session_cookie(response, issued: IssuedSession):
    config = current_app.config
    response.set_cookie(
        config["AUTH_COOKIE_NAME"],
        issued.token,
        max_age=issued.session.ttl_seconds,
        expires=issued.expires_at,
        domain=config.get("AUTH_COOKIE_DOMAIN"),
        secure=config.get("AUTH_COOKIE_SECURE", False),
        httponly=True,
        samesite=config.get("AUTH_COOKIE_SAMESITE", "Lax"),
        path="/",
    )
    return response


def clear_session_cookie(response):
    config = current_app.config
    response.delete_cookie(
        config["AUTH_COOKIE_NAME"],
        domain=config.get("AUTH_COOKIE_DOMAIN"),
        secure=config.get("AUTH_COOKIE_SECURE", False),
        httponly=True,
        samesite=config.get("AUTH_COOKIE_SAMESITE", "Lax"),
        path="/",
    )
    return response


__all__ = [
    "IssuedSession",
    "SessionResolution",
    "SessionManager",
    "session_ttl_seconds",
    "read_session_cookie",
    "set_session_cookie",
    "clear_session_cookie",
]
