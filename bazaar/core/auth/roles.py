"""Account roles, capability tags and the single authorization check."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Union

from bazaar.core.errors import NotFoundError


class Role(str, Enum):
    CUSTOMER = "customer"
    SELLER = "seller"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @classmethod
    def from_slug(cls, slug: str) -> "Role":
        """Map a route segment (``user``, ``shop``, ...) onto a role.

        Unknown slugs raise NotFoundError so that ``/auth/<slug>/...`` behaves
        like a missing route.
        """
        role = _SLUGS.get((slug or "").strip().lower())
        if role is None:
            raise NotFoundError("Unknown account type")
        return role

    @property
    def is_admin_kind(self) -> bool:
        return self in (Role.ADMIN, Role.SUPERADMIN)

    @property
    def user_type(self) -> str:
        """Tag the frontend uses to pick a dashboard."""
        return _USER_TYPES[self]


_SLUGS = {
    "user": Role.CUSTOMER,
    "customer": Role.CUSTOMER,
    "seller": Role.SELLER,
    "shop": Role.SELLER,
    "admin": Role.ADMIN,
    "superadmin": Role.SUPERADMIN,
}

_USER_TYPES = {
    Role.CUSTOMER: "user",
    Role.SELLER: "seller",
    Role.ADMIN: "admin",
    Role.SUPERADMIN: "superadmin",
}

# Roles allowed to self-register through the public endpoints.
SELF_REGISTER_ROLES = frozenset({Role.CUSTOMER, Role.SELLER})

# Admin capability tags
PERM_MANAGE_USERS = "manage_users"
PERM_MANAGE_SELLERS = "manage_sellers"
PERM_MANAGE_PRODUCTS = "manage_products"
PERM_MANAGE_ORDERS = "manage_orders"
PERM_MANAGE_SYSTEM = "manage_system"
PERM_VIEW_ANALYTICS = "view_analytics"
PERM_MANAGE_ADMINS = "manage_admins"

ALL_PERMISSIONS = (
    PERM_MANAGE_USERS,
    PERM_MANAGE_SELLERS,
    PERM_MANAGE_PRODUCTS,
    PERM_MANAGE_ORDERS,
    PERM_MANAGE_SYSTEM,
    PERM_VIEW_ANALYTICS,
    PERM_MANAGE_ADMINS,
)

DEFAULT_ADMIN_PERMISSIONS = (
    PERM_MANAGE_USERS,
    PERM_MANAGE_SELLERS,
    PERM_MANAGE_PRODUCTS,
    PERM_MANAGE_ORDERS,
    PERM_VIEW_ANALYTICS,
)

RoleRequirement = Union[Role, Iterable[Role]]


def authorize(role: Role | str | None, required: RoleRequirement) -> bool:
    """Return True when ``role`` satisfies ``required``.

    ``required`` is a single role or a collection of acceptable roles.
    Superadmin satisfies any admin requirement; no other role implies another.
    """
    if role is None:
        return False
    role = Role(role)
    # Role is a str subclass; a bare string is one requirement, not an iterable.
    wanted = {Role(required)} if isinstance(required, str) else {Role(r) for r in required}
    if role in wanted:
        return True
    return role is Role.SUPERADMIN and Role.ADMIN in wanted


def has_permission(role: Role | str | None, permissions: Iterable[str] | None, capability: str) -> bool:
    """Capability check for admin-kind accounts."""
    if role is None:
        return False
    role = Role(role)
    if role is Role.SUPERADMIN:
        return True
    if role is not Role.ADMIN:
        return False
    return capability in set(permissions or ())


__all__ = [
    "Role",
    "SELF_REGISTER_ROLES",
    "ALL_PERMISSIONS",
    "DEFAULT_ADMIN_PERMISSIONS",
    "PERM_MANAGE_USERS",
    "PERM_MANAGE_SELLERS",
    "PERM_MANAGE_PRODUCTS",
    "PERM_MANAGE_ORDERS",
    "PERM_MANAGE_SYSTEM",
    "PERM_VIEW_ANALYTICS",
    "PERM_MANAGE_ADMINS",
    "authorize",
    "has_permission",
]
