"""Persistence for session records."""

from __future__ import annotations

from datetime import datetime
from hashlib import sha256
from typing import Optional

from bazaar.core.auth.constants import SESSION_STATE_ACTIVE, SESSION_STATE_REVOKED
from bazaar.core.auth.models import AuthSession
from bazaar.extensions import db


def hash_token(raw: str) -> str:
    return sha256(raw.encode("utf-8")).hexdigest()


class SessionRepository:
    """Repository for session state. Nothing here commits; services own the transaction."""

    def __init__(self, session=None):
        self._session = session or db.session

    def add(self, record: AuthSession) -> AuthSession:
        self._session.add(record)
        self._session.flush()
        return record

    def get_by_token(self, raw_token: str) -> Optional[AuthSession]:
        if not raw_token:
            return None
        return AuthSession.query.filter_by(token_hash=hash_token(raw_token)).first()

    def get(self, account_id: str, session_id: int) -> Optional[AuthSession]:
        return AuthSession.query.filter_by(account_id=account_id, id=session_id).first()

    def revoke(self, record: AuthSession, reason: Optional[str] = None) -> bool:
        """Move an active record to revoked. Returns False if it was already terminal."""
        if record.lifecycle_state != SESSION_STATE_ACTIVE:
            return False
        record.lifecycle_state = SESSION_STATE_REVOKED
        record.revoked_at = datetime.utcnow()
        record.revoke_reason = reason
        return True

    def revoke_for_account(
        self,
        account_id: str,
        *,
        reason: Optional[str] = None,
        session_id: Optional[int] = None,
        except_token_hash: Optional[str] = None,
    ) -> list[int]:
        """Revoke active sessions for an account; returns the ids touched."""
        query = AuthSession.query.filter_by(account_id=account_id, lifecycle_state=SESSION_STATE_ACTIVE)
        if session_id is not None:
            query = query.filter(AuthSession.id == session_id)
        if except_token_hash:
            query = query.filter(AuthSession.token_hash != except_token_hash)
        revoked_ids: list[int] = []
        for record in query.all():
            if self.revoke(record, reason):
                revoked_ids.append(record.id)
        return revoked_ids

    def list_sessions(self, account_id: str, *, active_only: bool = False) -> list[AuthSession]:
        query = AuthSession.query.filter_by(account_id=account_id)
        if active_only:
            query = query.filter_by(lifecycle_state=SESSION_STATE_ACTIVE)
        return query.order_by(AuthSession.issued_at.desc(), AuthSession.id.desc()).all()


__all__ = ["SessionRepository", "hash_token"]
