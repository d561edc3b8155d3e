"""Admin account management: capability checks, deactivation, admin CRUD."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

from bazaar.core.accounts.models import Account
from bazaar.core.auth.roles import (
    DEFAULT_ADMIN_PERMISSIONS,
    PERM_MANAGE_USERS,
    Role,
)
from bazaar.extensions import db


def test_admin_lists_accounts_with_filters(make_account, login_as):
    admin = make_account(Role.ADMIN)
    for _ in range(3):
        make_account(Role.CUSTOMER)
    make_account(Role.SELLER)

    client = login_as(admin)
    everyone = client.get("/auth/admin/accounts").get_json()
    customers = client.get("/auth/admin/accounts?role=user&perPage=2").get_json()

    # Admin kinds are listed to superadmins only.
    assert everyone["total"] == 4
    assert {a["role"] for a in everyone["accounts"]} == {"customer", "seller"}
    assert customers["total"] == 3
    assert customers["pages"] == 2
    assert len(customers["accounts"]) == 2
    assert {a["role"] for a in customers["accounts"]} == {"customer"}
    assert all("passwordHash" not in a and "password_hash" not in a for a in everyone["accounts"])


def test_admin_routes_require_session(client):
    assert client.get("/auth/admin/accounts").status_code == 401
    assert client.post("/auth/admin/accounts/abc/deactivate").status_code == 401
    assert client.get("/auth/admin/list").status_code == 401


def test_deactivation_kills_existing_sessions(app, make_account, login_as):
    admin = make_account(Role.ADMIN)
    customer = make_account(Role.CUSTOMER)
    customer_client = login_as(customer)
    assert customer_client.get("/auth/me").status_code == 200

    resp = login_as(admin).post(f"/auth/admin/accounts/{customer.id}/deactivate")

    assert resp.status_code == 200
    assert resp.get_json()["user"]["status"] == "deactivated"
    assert customer_client.get("/auth/me").status_code == 401
    relogin = app.test_client().post(
        "/auth/login-user", json={"loginKey": customer.login_key, "password": "pass1234"}
    )
    assert relogin.status_code == 401


def test_deactivation_is_enforced_even_without_eager_revocation(app, make_account, login_as):
    """Resolve re-reads the account, so a status flip alone is enough."""
    customer = make_account(Role.CUSTOMER)
    customer_client = login_as(customer)
    with app.app_context():
        db.session.get(Account, customer.id).status = "deactivated"
        db.session.commit()

    assert customer_client.get("/auth/me").status_code == 401


def test_restore_reenables_login(app, make_account, login_as):
    admin = make_account(Role.ADMIN)
    customer = make_account(Role.CUSTOMER)
    admin_client = login_as(admin)
    admin_client.post(f"/auth/admin/accounts/{customer.id}/deactivate")

    resp = admin_client.post(f"/auth/admin/accounts/{customer.id}/restore")

    assert resp.status_code == 200
    assert resp.get_json()["user"]["status"] == "active"
    login_as(customer)


def test_admin_needs_matching_capability(make_account, login_as):
    limited = make_account(Role.ADMIN, permissions=[PERM_MANAGE_USERS])
    seller = make_account(Role.SELLER)
    customer = make_account(Role.CUSTOMER)
    client = login_as(limited)

    assert client.post(f"/auth/admin/accounts/{seller.id}/deactivate").status_code == 403
    assert client.post(f"/auth/admin/accounts/{customer.id}/deactivate").status_code == 200


def test_admin_cannot_manage_other_admins_or_self(make_account, login_as):
    admin = make_account(Role.ADMIN)
    peer = make_account(Role.ADMIN)
    root = make_account(Role.SUPERADMIN)
    client = login_as(admin)

    assert client.post(f"/auth/admin/accounts/{peer.id}/deactivate").status_code == 403
    assert client.post(f"/auth/admin/accounts/{root.id}/deactivate").status_code == 403
    assert client.post(f"/auth/admin/accounts/{admin.id}/deactivate").status_code == 403


def test_superadmin_cannot_be_deactivated(make_account, login_as):
    root = make_account(Role.SUPERADMIN)
    other_root = make_account(Role.SUPERADMIN)
    resp = login_as(root).post(f"/auth/admin/accounts/{other_root.id}/deactivate")
    assert resp.status_code == 403


def test_deactivate_unknown_account(make_account, login_as):
    admin = make_account(Role.ADMIN)
    resp = login_as(admin).post("/auth/admin/accounts/does-not-exist/deactivate")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


def test_superadmin_creates_admin_who_can_log_in(app, make_account, login_as):
    root = make_account(Role.SUPERADMIN)
    client = login_as(root)

    resp = client.post(
        "/auth/admin/create",
        json={"name": "Ops", "email": "Ops@Example.com", "password": "opspass123"},
    )

    assert resp.status_code == 201
    created = resp.get_json()["user"]
    assert created["role"] == "admin"
    assert created["loginKey"] == "ops@example.com"
    assert set(created["permissions"]) == set(DEFAULT_ADMIN_PERMISSIONS)
    with app.app_context():
        assert db.session.get(Account, created["id"]).created_by_id == root.id

    login = app.test_client().post("/auth/login-admin", json={"email": "ops@example.com", "password": "opspass123"})
    assert login.status_code == 200


def test_admin_create_rejects_taken_login_key(make_account, login_as):
    root = make_account(Role.SUPERADMIN)
    make_account(Role.ADMIN, login_key="ops@example.com")
    resp = login_as(root).post(
        "/auth/admin/create",
        json={"name": "Ops", "email": "ops@example.com", "password": "opspass123"},
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "conflict"


def test_plain_admin_cannot_use_superadmin_routes(make_account, login_as):
    admin = make_account(Role.ADMIN)
    client = login_as(admin)
    assert client.get("/auth/admin/list").status_code == 403
    assert (
        client.post("/auth/admin/create", json={"name": "x", "email": "x@example.com", "password": "longpass1"}).status_code
        == 403
    )


def test_superadmin_lists_and_removes_admins(make_account, login_as):
    root = make_account(Role.SUPERADMIN)
    admin = make_account(Role.ADMIN)
    customer = make_account(Role.CUSTOMER)
    admin_client = login_as(admin)
    client = login_as(root)

    listing = client.get("/auth/admin/list").get_json()
    assert {a["id"] for a in listing["accounts"]} == {root.id, admin.id}

    assert client.delete(f"/auth/admin/{customer.id}").status_code == 404
    resp = client.delete(f"/auth/admin/{admin.id}")
    assert resp.status_code == 200
    assert resp.get_json()["user"]["status"] == "deactivated"
    assert admin_client.get("/auth/me").status_code == 401


def test_superadmin_resets_sessions(make_account, login_as):
    root = make_account(Role.SUPERADMIN)
    customer = make_account(Role.CUSTOMER)
    first = login_as(customer)
    second = login_as(customer)

    resp = login_as(root).post(
        f"/auth/admin/accounts/{customer.id}/sessions/reset", json={"reason": "support ticket"}
    )

    assert resp.status_code == 200
    assert resp.get_json()["reset_count"] == 2
    assert first.get("/auth/me").status_code == 401
    assert second.get("/auth/me").status_code == 401


def test_session_reset_requires_reason(make_account, login_as):
    root = make_account(Role.SUPERADMIN)
    customer = make_account(Role.CUSTOMER)
    resp = login_as(root).post(f"/auth/admin/accounts/{customer.id}/sessions/reset", json={})
    assert resp.status_code == 400


@pytest.mark.parametrize("role_filter", ["admin", "superadmin"])
def test_plain_admin_cannot_list_admin_kinds(make_account, login_as, role_filter):
    admin = make_account(Role.ADMIN)
    make_account(Role.SUPERADMIN)
    resp = login_as(admin).get(f"/auth/admin/accounts?role={role_filter}")
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "forbidden"


def test_listing_follows_admin_capabilities(make_account, login_as):
    users_only = make_account(Role.ADMIN, permissions=[PERM_MANAGE_USERS])
    make_account(Role.CUSTOMER)
    make_account(Role.SELLER)
    client = login_as(users_only)

    unfiltered = client.get("/auth/admin/accounts").get_json()
    assert {a["role"] for a in unfiltered["accounts"]} == {"customer"}
    assert client.get("/auth/admin/accounts?role=seller").status_code == 403


def test_listing_needs_a_management_capability(make_account, login_as):
    analyst = make_account(Role.ADMIN, permissions=["view_analytics"])
    assert login_as(analyst).get("/auth/admin/accounts").status_code == 403


def test_superadmin_lists_every_kind(make_account, login_as):
    root = make_account(Role.SUPERADMIN)
    make_account(Role.ADMIN)
    make_account(Role.CUSTOMER)
    body = login_as(root).get("/auth/admin/accounts").get_json()
    assert {a["role"] for a in body["accounts"]} == {"superadmin", "admin", "customer"}
    assert login_as(root).get("/auth/admin/accounts?role=admin").get_json()["total"] == 1
