"""Error taxonomy for the accounts API.

Every error maps to a JSON envelope of the form::

    {"success": false, "error": "<code>", "message": "<human readable>"}

Handlers for these classes are registered by the app factory; service code
raises them and never builds error responses itself.
"""

from __future__ import annotations

from typing import Any, Optional


class BazaarError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500
    error = "unexpected_error"
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, *, details: Optional[list[dict[str, Any]]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "error": self.error, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(BazaarError):
    """Missing or malformed input field."""

    status_code = 400
    error = "validation_error"
    default_message = "Invalid request"


class AuthenticationError(BazaarError):
    """No valid session, or credentials did not match. Message stays generic."""

    status_code = 401
    error = "unauthorized"
    default_message = "Please login to continue"


class AuthorizationError(BazaarError):
    """Valid session, insufficient role or capability."""

    status_code = 403
    error = "forbidden"
    default_message = "You do not have access to this resource"


class NotFoundError(BazaarError):
    status_code = 404
    error = "not_found"
    default_message = "Resource not found"


class ConflictError(BazaarError):
    """Login key already registered (under any role)."""

    status_code = 400
    error = "conflict"
    default_message = "An account with this login already exists"


class TransientError(BazaarError):
    """Storage or hashing failure; safe to retry with backoff."""

    status_code = 503
    error = "service_unavailable"
    default_message = "Service temporarily unavailable, please retry"


INVALID_CREDENTIALS = "Invalid credentials"

__all__ = [
    "BazaarError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "TransientError",
    "INVALID_CREDENTIALS",
]
