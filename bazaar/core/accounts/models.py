"""Account model: one table for every role so login keys are unique globally."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from flask_login import UserMixin
from sqlalchemy.orm import Mapped, mapped_column

from bazaar.core.auth.constants import ACCOUNT_STATUS_ACTIVE
from bazaar.core.auth.roles import Role
from bazaar.extensions import db


def _new_account_id() -> str:
    return uuid4().hex


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)


class Account(db.Model, TimestampMixin, UserMixin):
    __tablename__ = "account"
    __table_args__ = (
        db.UniqueConstraint("login_key", name="uq_account_login_key"),
        db.Index("ix_account_role_status", "role", "status"),
    )

    id: Mapped[str] = mapped_column(db.String(32), primary_key=True, default=_new_account_id)
    display_name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    login_key: Mapped[str] = mapped_column(db.String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(db.String(255))
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    role: Mapped[str] = mapped_column(db.String(16), nullable=False, default=Role.CUSTOMER.value)
    status: Mapped[str] = mapped_column(db.String(16), nullable=False, default=ACCOUNT_STATUS_ACTIVE)
    avatar: Mapped[str | None] = mapped_column(db.String(512))

    # Seller profile
    address: Mapped[str | None] = mapped_column(db.String(512))
    zip_code: Mapped[str | None] = mapped_column(db.String(16))

    # Admin profile
    permissions: Mapped[list] = mapped_column(db.JSON, nullable=False, default=list)
    failed_login_attempts: Mapped[int] = mapped_column(default=0)
    locked_until: Mapped[datetime | None] = mapped_column(nullable=True)
    last_login_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_by_id: Mapped[str | None] = mapped_column(db.ForeignKey("account.id"), nullable=True)

    @property
    def role_enum(self) -> Role:
        return Role(self.role)

    @property
    def is_active(self) -> bool:  # flask_login hook
        return self.status == ACCOUNT_STATUS_ACTIVE

    def is_locked(self, now: datetime | None = None) -> bool:
        return bool(self.locked_until and self.locked_until > (now or datetime.utcnow()))

    def __repr__(self) -> str:
        return f"<Account {self.id} role={self.role} status={self.status}>"
