"""Persistent audit events."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from bazaar.extensions import db


class EventRecord(db.Model):
    __tablename__ = "event_record"
    __table_args__ = (
        db.Index("ix_event_record_account_created_at", "account_id", "created_at"),
        db.Index("ix_event_record_account_event_type", "account_id", "event_type"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    event_type: Mapped[str] = mapped_column(db.String(128), index=True, nullable=False)
    payload: Mapped[dict] = mapped_column(db.JSON, nullable=False, default=dict)
    # No FK: failed logins are recorded for keys that match no account.
    account_id: Mapped[str | None] = mapped_column(db.String(32), index=True)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, index=True)
