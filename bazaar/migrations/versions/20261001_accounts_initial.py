"""Accounts, auth sessions and event records.

Revision ID: 20261001_accounts_initial
Revises:
Create Date: 2026-10-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261001_accounts_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "account",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("display_name", sa.String(length=255), nullable=False),
        sa.Column("login_key", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="customer"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
        sa.Column("avatar", sa.String(length=512), nullable=True),
        sa.Column("address", sa.String(length=512), nullable=True),
        sa.Column("zip_code", sa.String(length=16), nullable=True),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("locked_until", sa.DateTime(), nullable=True),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("created_by_id", sa.String(length=32), sa.ForeignKey("account.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("login_key", name="uq_account_login_key"),
    )
    op.create_index("ix_account_role_status", "account", ["role", "status"])

    op.create_table(
        "auth_session",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("account_id", sa.String(length=32), sa.ForeignKey("account.id"), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("lifecycle_state", sa.String(length=16), nullable=False, server_default="active"),
        sa.Column("issued_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("ttl_seconds", sa.Integer(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(), nullable=True),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        sa.Column("revoke_reason", sa.String(length=64), nullable=True),
        sa.Column("remember_me", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("user_agent", sa.String(length=255), nullable=True),
        sa.UniqueConstraint("token_hash", name="uq_auth_session_token_hash"),
    )
    op.create_index("ix_auth_session_account", "auth_session", ["account_id"])
    op.create_index("ix_auth_session_account_state", "auth_session", ["account_id", "lifecycle_state"])

    op.create_table(
        "event_record",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("account_id", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_event_record_event_type", "event_record", ["event_type"])
    op.create_index("ix_event_record_account_id", "event_record", ["account_id"])
    op.create_index("ix_event_record_created_at", "event_record", ["created_at"])
    op.create_index("ix_event_record_account_created_at", "event_record", ["account_id", "created_at"])
    op.create_index("ix_event_record_account_event_type", "event_record", ["account_id", "event_type"])


def downgrade():
    op.drop_index("ix_event_record_account_event_type", table_name="event_record")
    op.drop_index("ix_event_record_account_created_at", table_name="event_record")
    op.drop_index("ix_event_record_created_at", table_name="event_record")
    op.drop_index("ix_event_record_account_id", table_name="event_record")
    op.drop_index("ix_event_record_event_type", table_name="event_record")
    op.drop_table("event_record")

    op.drop_index("ix_auth_session_account_state", table_name="auth_session")
    op.drop_index("ix_auth_session_account", table_name="auth_session")
    op.drop_table("auth_session")

    op.drop_index("ix_account_role_status", table_name="account")
    op.drop_table("account")
