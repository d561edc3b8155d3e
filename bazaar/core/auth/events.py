"""Auth and account event catalog."""

from __future__ import annotations

ACCOUNT_REGISTERED = "account.registered"
ACCOUNT_PROFILE_UPDATED = "account.profile_updated"
ACCOUNT_PASSWORD_CHANGED = "account.password_changed"
ACCOUNT_DEACTIVATED = "account.deactivated"
ACCOUNT_RESTORED = "account.restored"
ACCOUNT_LOCKED = "account.locked"

AUTH_SESSION_CREATED = "auth.session.created"
AUTH_SESSION_REVOKED = "auth.session.revoked"
AUTH_SESSION_ADMIN_RESET = "auth.session.admin_reset"
AUTH_LOGIN_FAILED = "auth.login.failed"

EVENT_CATALOG = {
    ACCOUNT_REGISTERED: {
        "version": "v1",
        "payload": {"account_id": "str", "role": "str", "created_by_id": "str?"},
    },
    ACCOUNT_PROFILE_UPDATED: {
        "version": "v1",
        "payload": {"account_id": "str", "fields": "list[str]"},
    },
    ACCOUNT_PASSWORD_CHANGED: {
        "version": "v1",
        "payload": {"account_id": "str", "revoked_sessions": "int"},
    },
    ACCOUNT_DEACTIVATED: {
        "version": "v1",
        "payload": {"account_id": "str", "actor_id": "str?", "revoked_sessions": "int"},
    },
    ACCOUNT_RESTORED: {
        "version": "v1",
        "payload": {"account_id": "str", "actor_id": "str?"},
    },
    ACCOUNT_LOCKED: {
        "version": "v1",
        "payload": {"account_id": "str", "locked_until": "datetime"},
    },
    AUTH_SESSION_CREATED: {
        "version": "v1",
        "payload": {"session_id": "int", "account_id": "str", "role": "str", "expires_at": "datetime"},
    },
    AUTH_SESSION_REVOKED: {
        "version": "v1",
        "payload": {"session_id": "int", "account_id": "str", "reason": "str?"},
    },
    AUTH_SESSION_ADMIN_RESET: {
        "version": "v1",
        "payload": {
            "account_id": "str",
            "session_scope": "str",  # 'single'|'all'
            "session_id": "int?",
            "reason": "str",
            "initiated_by_admin_id": "str?",
        },
    },
    AUTH_LOGIN_FAILED: {
        "version": "v1",
        "payload": {"role": "str", "account_id": "str?"},
    },
}

__all__ = [
    "ACCOUNT_REGISTERED",
    "ACCOUNT_PROFILE_UPDATED",
    "ACCOUNT_PASSWORD_CHANGED",
    "ACCOUNT_DEACTIVATED",
    "ACCOUNT_RESTORED",
    "ACCOUNT_LOCKED",
    "AUTH_SESSION_CREATED",
    "AUTH_SESSION_REVOKED",
    "AUTH_SESSION_ADMIN_RESET",
    "AUTH_LOGIN_FAILED",
    "EVENT_CATALOG",
]
