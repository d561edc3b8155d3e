"""Server-side session records."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from bazaar.core.auth.constants import SESSION_STATE_ACTIVE
from bazaar.extensions import db


class AuthSession(db.Model):
    __tablename__ = "auth_session"
    __table_args__ = (
        db.UniqueConstraint("token_hash", name="uq_auth_session_token_hash"),
        db.Index("ix_auth_session_account", "account_id"),
        db.Index("ix_auth_session_account_state", "account_id", "lifecycle_state"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    # sha256 of the cookie value; the raw token is never stored
    token_hash: Mapped[str] = mapped_column(db.String(64), nullable=False)
    account_id: Mapped[str] = mapped_column(db.ForeignKey("account.id"), nullable=False)
    role: Mapped[str] = mapped_column(db.String(16), nullable=False)
    lifecycle_state: Mapped[str] = mapped_column(db.String(16), nullable=False, default=SESSION_STATE_ACTIVE)
    issued_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    ttl_seconds: Mapped[int] = mapped_column(nullable=False)
    last_seen_at: Mapped[datetime | None] = mapped_column(nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(nullable=True)
    revoke_reason: Mapped[str | None] = mapped_column(db.String(64))
    remember_me: Mapped[bool] = mapped_column(default=False)
    ip_address: Mapped[str | None] = mapped_column(db.String(64))
    user_agent: Mapped[str | None] = mapped_column(db.String(255))

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or datetime.utcnow())
