"""Session lifecycle and account constants."""

from __future__ import annotations

# Session lifecycle states
SESSION_STATE_ACTIVE = "active"
SESSION_STATE_REVOKED = "revoked"
SESSION_STATE_EXPIRED = "expired"
# Resolution-only state: no cookie, unknown token, or account no longer eligible.
SESSION_STATE_ABSENT = "absent"

# Scope values for admin resets
SESSION_SCOPE_SINGLE = "single"
SESSION_SCOPE_ALL = "all"

# Revocation reasons recorded on the session row
REVOKE_REASON_LOGOUT = "logout"
REVOKE_REASON_RELOGIN = "relogin"
REVOKE_REASON_PASSWORD_CHANGED = "password_changed"
REVOKE_REASON_DEACTIVATED = "account_deactivated"

ACCOUNT_STATUS_ACTIVE = "active"
ACCOUNT_STATUS_DEACTIVATED = "deactivated"

PHONE_NUMBER_PATTERN = r"^\d{10}$"
MIN_PASSWORD_LENGTH = 6

__all__ = [
    "SESSION_STATE_ACTIVE",
    "SESSION_STATE_REVOKED",
    "SESSION_STATE_EXPIRED",
    "SESSION_STATE_ABSENT",
    "SESSION_SCOPE_SINGLE",
    "SESSION_SCOPE_ALL",
    "REVOKE_REASON_LOGOUT",
    "REVOKE_REASON_RELOGIN",
    "REVOKE_REASON_PASSWORD_CHANGED",
    "REVOKE_REASON_DEACTIVATED",
    "ACCOUNT_STATUS_ACTIVE",
    "ACCOUNT_STATUS_DEACTIVATED",
    "PHONE_NUMBER_PATTERN",
    "MIN_PASSWORD_LENGTH",
]
