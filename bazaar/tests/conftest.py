import itertools
import sys
from pathlib import Path

import pytest
from flask import has_app_context

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bazaar import create_app
from bazaar.core.accounts.services import register_account
from bazaar.core.auth.roles import Role
from bazaar.extensions import db

DEFAULT_PASSWORD = "pass1234"
COOKIE_NAME = "bazaar_session"

_LOGIN_SLUGS = {
    Role.CUSTOMER: "user",
    Role.SELLER: "seller",
    Role.ADMIN: "admin",
    Role.SUPERADMIN: "admin",
}


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


@pytest.fixture()
def app():
    """Per-test app on a private in-memory database.

    No app context stays pushed while requests run: Flask would reuse it and
    leak ``g`` (and the logged-in user) from one request into the next.
    """
    app = create_app("testing")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(app):
    """App context for service-level tests that never issue requests."""
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_account(app):
    """Create accounts through the regular registration path."""
    counter = itertools.count(1)

    def _make(role=Role.CUSTOMER, *, login_key=None, password=DEFAULT_PASSWORD, name=None, **fields):
        role = Role(role)
        n = next(counter)
        if login_key is None:
            login_key = f"{role.value}{n}@example.com" if role.is_admin_kind else f"98765{n:05d}"
        if role is Role.SELLER:
            fields.setdefault("address", "12 Market Road")
            fields.setdefault("zip_code", "560001")
        kwargs = dict(login_key=login_key, password=password, display_name=name or f"{role.value} {n}", **fields)
        if has_app_context():
            return register_account(role, **kwargs)
        with app.app_context():
            return register_account(role, **kwargs)

    return _make


@pytest.fixture()
def login_as(app):
    """Return a fresh test client holding a session for ``account``."""

    def _login(account, password=DEFAULT_PASSWORD, remember_me=False):
        client = app.test_client()
        slug = _LOGIN_SLUGS[Role(account.role)]
        resp = client.post(
            f"/auth/login-{slug}",
            json={"loginKey": account.login_key, "password": password, "rememberMe": remember_me},
        )
        assert resp.status_code == 200, resp.get_json()
        return client

    return _login


@pytest.fixture()
def session_token():
    """Read the raw session token a client currently holds."""

    def _token(client):
        cookie = client.get_cookie(COOKIE_NAME)
        return cookie.value if cookie is not None else None

    return _token
