"""Session endpoints: logout, me, session-status, refresh, check-access."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

pytestmark = pytest.mark.integration

from bazaar.core.auth.models import AuthSession
from bazaar.core.auth.roles import Role
from bazaar.core.auth.session_repository import hash_token
from bazaar.extensions import db

COOKIE_NAME = "bazaar_session"


def test_me_without_cookie_is_unauthorized(client):
    resp = client.get("/auth/me")
    assert resp.status_code == 401
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"] == "unauthorized"


def test_logout_is_idempotent(client, make_account, login_as, session_token):
    account = make_account(Role.CUSTOMER)
    logged_in = login_as(account)
    token = session_token(logged_in)

    first = logged_in.post("/auth/logout")
    assert first.status_code == 200
    assert first.get_json()["success"] is True
    assert session_token(logged_in) is None

    # Replaying the old cookie and logging out with no cookie both succeed.
    logged_in.set_cookie(COOKIE_NAME, token)
    assert logged_in.post("/auth/logout/user").status_code == 200
    assert client.post("/auth/logout").status_code == 200


def test_old_cookie_is_dead_after_logout(client, make_account, login_as, session_token):
    account = make_account(Role.SELLER)
    logged_in = login_as(account)
    token = session_token(logged_in)
    logged_in.post("/auth/logout/seller")

    client.set_cookie(COOKIE_NAME, token)
    resp = client.get("/auth/me")

    assert resp.status_code == 401
    # The dead cookie is cleared on the way out.
    assert session_token(client) is None


def test_logout_with_unknown_role_slug_is_not_found(client):
    assert client.post("/auth/logout/vendor").status_code == 404


def test_session_status(client, make_account, login_as):
    anonymous = client.get("/auth/session-status").get_json()
    assert anonymous["isAuthenticated"] is False
    assert anonymous["userType"] is None

    account = make_account(Role.SELLER)
    status = login_as(account).get("/auth/session-status").get_json()
    assert status["isAuthenticated"] is True
    assert status["userType"] == "seller"
    assert status["user"]["id"] == account.id
    assert status["expiresAt"]


def test_refresh_extends_expiry(app, make_account, login_as, session_token):
    account = make_account(Role.CUSTOMER)
    logged_in = login_as(account)
    token = session_token(logged_in)
    with app.app_context():
        record = AuthSession.query.filter_by(token_hash=hash_token(token)).one()
        record.expires_at = datetime.utcnow() + timedelta(minutes=5)
        db.session.commit()

    resp = logged_in.post("/auth/refresh")

    assert resp.status_code == 200
    expires_at = datetime.fromisoformat(resp.get_json()["expiresAt"])
    assert expires_at > datetime.utcnow() + timedelta(hours=1)
    assert session_token(logged_in) == token


def test_refresh_requires_session(client):
    assert client.post("/auth/refresh").status_code == 401


def test_expired_cookie_is_unauthorized(app, make_account, login_as, session_token):
    account = make_account(Role.CUSTOMER)
    logged_in = login_as(account)
    with app.app_context():
        record = AuthSession.query.filter_by(token_hash=hash_token(session_token(logged_in))).one()
        record.expires_at = datetime.utcnow() - timedelta(seconds=1)
        db.session.commit()

    assert logged_in.get("/auth/me").status_code == 401


@pytest.mark.parametrize(
    "role,slug,expected",
    [
        (Role.CUSTOMER, "user", {"isAdmin": False, "isSuperAdmin": False, "hasAccess": True}),
        (Role.SELLER, "user", {"isAdmin": False, "isSuperAdmin": False, "hasAccess": False}),
        (Role.ADMIN, "admin", {"isAdmin": True, "isSuperAdmin": False, "hasAccess": True}),
        (Role.ADMIN, "superadmin", {"isAdmin": True, "isSuperAdmin": False, "hasAccess": False}),
        (Role.SUPERADMIN, "admin", {"isAdmin": True, "isSuperAdmin": True, "hasAccess": True}),
    ],
)
def test_check_access(make_account, login_as, role, slug, expected):
    account = make_account(role)
    body = login_as(account).get(f"/auth/{slug}/check-access").get_json()
    for key, value in expected.items():
        assert body[key] is value
    assert body["canAccessAdmin"] is expected["isAdmin"]
    assert body["userType"] == role.user_type


def test_seller_session_cannot_reach_customer_resource(make_account, login_as):
    seller = make_account(Role.SELLER)
    resp = login_as(seller).put("/auth/user/update-profile", json={"name": "Nope"})
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "forbidden"


def test_customer_session_cannot_reach_admin_resource(make_account, login_as):
    customer = make_account(Role.CUSTOMER)
    resp = login_as(customer).get("/auth/admin/accounts")
    assert resp.status_code == 403


def test_remember_me_issues_longer_cookie(app, make_account, login_as, session_token):
    account = make_account(Role.CUSTOMER)
    logged_in = login_as(account, remember_me=True)
    with app.app_context():
        record = AuthSession.query.filter_by(token_hash=hash_token(session_token(logged_in))).one()
        assert record.remember_me is True
        assert record.ttl_seconds == app.config["SESSION_REMEMBER_TTL_SECONDS"]


def test_sliding_expiration_reissues_cookie(app, make_account, login_as, session_token):
    account = make_account(Role.CUSTOMER)
    logged_in = login_as(account)
    token = session_token(logged_in)
    with app.app_context():
        record = AuthSession.query.filter_by(token_hash=hash_token(token)).one()
        record.expires_at = datetime.utcnow() + timedelta(hours=1)
        db.session.commit()

    resp = logged_in.get("/auth/me")

    assert resp.status_code == 200
    set_cookie = resp.headers.get("Set-Cookie")
    assert set_cookie is not None
    assert set_cookie.startswith(f"{COOKIE_NAME}={token}")
    assert f"Max-Age={app.config['SESSION_TTL_SECONDS']}" in set_cookie
    assert "HttpOnly" in set_cookie
    assert session_token(logged_in) == token


def test_no_slide_no_cookie(app, make_account, login_as):
    app.config["SESSION_SLIDING_EXPIRATION"] = False
    account = make_account(Role.CUSTOMER)
    resp = login_as(account).get("/auth/me")
    assert resp.status_code == 200
    assert "Set-Cookie" not in resp.headers


def test_logout_still_clears_cookie_after_resolution(make_account, login_as, session_token):
    account = make_account(Role.CUSTOMER)
    logged_in = login_as(account)
    assert logged_in.get("/auth/session-status").status_code == 200
    logged_in.post("/auth/logout")
    assert session_token(logged_in) is None
