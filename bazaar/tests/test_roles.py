import pytest

from bazaar.core.auth.roles import (
    PERM_MANAGE_ADMINS,
    PERM_MANAGE_SELLERS,
    PERM_MANAGE_USERS,
    Role,
    authorize,
    has_permission,
)
from bazaar.core.errors import NotFoundError

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "role,required,expected",
    [
        (Role.CUSTOMER, Role.CUSTOMER, True),
        (Role.CUSTOMER, Role.SELLER, False),
        (Role.SELLER, Role.CUSTOMER, False),
        (Role.SELLER, Role.SELLER, True),
        (Role.ADMIN, Role.ADMIN, True),
        (Role.ADMIN, Role.SUPERADMIN, False),
        (Role.SUPERADMIN, Role.ADMIN, True),
        (Role.SUPERADMIN, Role.SUPERADMIN, True),
        (Role.ADMIN, Role.CUSTOMER, False),
        (Role.SUPERADMIN, Role.SELLER, False),
    ],
)
def test_authorize_matrix(role, required, expected):
    assert authorize(role, required) is expected


def test_authorize_accepts_a_set_of_roles():
    assert authorize(Role.SELLER, {Role.CUSTOMER, Role.SELLER}) is True
    assert authorize(Role.SUPERADMIN, [Role.ADMIN]) is True
    assert authorize(Role.CUSTOMER, (Role.SELLER, Role.ADMIN)) is False


def test_authorize_accepts_plain_strings():
    assert authorize("superadmin", "admin") is True
    assert authorize("customer", "seller") is False


def test_authorize_without_role_is_denied():
    assert authorize(None, Role.CUSTOMER) is False


@pytest.mark.parametrize(
    "slug,role",
    [
        ("user", Role.CUSTOMER),
        ("customer", Role.CUSTOMER),
        ("seller", Role.SELLER),
        ("shop", Role.SELLER),
        ("ADMIN", Role.ADMIN),
        ("superadmin", Role.SUPERADMIN),
    ],
)
def test_from_slug(slug, role):
    assert Role.from_slug(slug) is role


def test_unknown_slug_raises_not_found():
    with pytest.raises(NotFoundError):
        Role.from_slug("vendor")


def test_user_type_tags():
    assert Role.CUSTOMER.user_type == "user"
    assert Role.SELLER.user_type == "seller"
    assert Role.SUPERADMIN.user_type == "superadmin"


def test_has_permission():
    assert has_permission(Role.SUPERADMIN, [], PERM_MANAGE_ADMINS) is True
    assert has_permission(Role.ADMIN, [PERM_MANAGE_USERS], PERM_MANAGE_USERS) is True
    assert has_permission(Role.ADMIN, [PERM_MANAGE_USERS], PERM_MANAGE_SELLERS) is False
    assert has_permission(Role.SELLER, [PERM_MANAGE_USERS], PERM_MANAGE_USERS) is False
    assert has_permission(None, None, PERM_MANAGE_USERS) is False
