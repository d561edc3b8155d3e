"""Reusable access-control decorators for controllers.

The current principal is resolved once per request by the login manager's
request loader; these decorators only read ``current_user`` and
``g.auth_role`` and defer every role decision to ``roles.authorize``.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar

from flask import g
from flask_login import current_user

from bazaar.core.auth.roles import Role, authorize, has_permission
from bazaar.core.errors import AuthenticationError, AuthorizationError

F = TypeVar("F", bound=Callable)


def current_role() -> Role | None:
    if not current_user.is_authenticated:
        return None
    return getattr(g, "auth_role", None)


def login_required_json(fn: F) -> F:
    """401 envelope unless the request carries an active session."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        if not current_user.is_authenticated:
            raise AuthenticationError()
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_roles(*required_roles: Role):
    """Enforce that the session's role satisfies one of ``required_roles``."""

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):  # type: ignore[misc]
            if not current_user.is_authenticated:
                raise AuthenticationError()
            if not authorize(current_role(), required_roles):
                raise AuthorizationError()
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def require_permission(*capabilities: str):
    """Admin-kind session holding at least one of ``capabilities`` (superadmin holds all)."""

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):  # type: ignore[misc]
            if not current_user.is_authenticated:
                raise AuthenticationError()
            role = current_role()
            held = current_user.permissions
            if not authorize(role, Role.ADMIN) or not any(has_permission(role, held, c) for c in capabilities):
                raise AuthorizationError()
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["current_role", "login_required_json", "require_roles", "require_permission"]
