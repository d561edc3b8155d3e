"""Auth HTTP controllers (API only)."""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request
from flask_login import current_user

from bazaar.core.auth.auth_service import login as login_account
from bazaar.core.auth.auth_service import logout as logout_session
from bazaar.core.auth.auth_service import register as register_account
from bazaar.core.auth.constants import REVOKE_REASON_RELOGIN
from bazaar.core.auth.roles import SELF_REGISTER_ROLES, Role, authorize
from bazaar.core.auth.schemas import (
    AdminLoginRequest,
    ChangePasswordRequest,
    LoginRequest,
    RegisterCustomerRequest,
    RegisterSellerRequest,
    UpdateProfileRequest,
    serialize_account,
)
from bazaar.core.auth.session_services import (
    IssuedSession,
    SessionManager,
    clear_session_cookie,
    read_session_cookie,
    set_session_cookie,
)
from bazaar.core.accounts.services import change_password as change_account_password
from bazaar.core.accounts.services import update_profile as update_account_profile
from bazaar.core.errors import AuthenticationError, AuthorizationError, NotFoundError
from bazaar.core.utils.decorators import current_role, login_required_json
from bazaar.core.utils.validation import parse
from bazaar.extensions import limiter

auth_bp = Blueprint("auth_api", __name__)


def _client_meta() -> dict:
    return {"ip_address": request.remote_addr, "user_agent": request.headers.get("User-Agent")}


def _session_body(account, issued: IssuedSession | None = None, **extra) -> dict:
    body = {
        "success": True,
        "user": serialize_account(account),
        "userType": account.role_enum.user_type,
    }
    if issued is not None:
        body["expiresAt"] = issued.expires_at.isoformat()
    body.update(extra)
    return body


def _account_for_route(slug: str):
    """Current account, provided the session's role satisfies the route's role."""
    role = Role.from_slug(slug)
    if not current_user.is_authenticated:
        raise AuthenticationError()
    if not authorize(current_role(), role):
        raise AuthorizationError()
    return current_user._get_current_object()


@auth_bp.post("/register-<slug>")
@limiter.limit("5/minute")
def register(slug: str):
    role = Role.from_slug(slug)
    if role not in SELF_REGISTER_ROLES:
        raise NotFoundError("Unknown account type")
    schema = RegisterSellerRequest if role is Role.SELLER else RegisterCustomerRequest
    data = parse(schema)
    account = register_account(role, data)

    sessions = SessionManager()
    stale = read_session_cookie(request)
    if stale:
        sessions.destroy_session(stale, reason=REVOKE_REASON_RELOGIN)
    issued = sessions.create_session(account, remember_me=data.remember_me, **_client_meta())
    g.auth_cookie_issued = True
    resp = jsonify(_session_body(account, issued, message="Registration successful"))
    resp.status_code = 201
    return set_session_cookie(resp, issued)


@auth_bp.post("/login-<slug>")
@limiter.limit("10/minute")
def login(slug: str):
    role = Role.from_slug(slug)
    data = parse(AdminLoginRequest if role.is_admin_kind else LoginRequest)
    account, issued = login_account(
        role,
        data.login_key,
        data.password,
        remember_me=data.remember_me,
        stale_token=read_session_cookie(request),
        **_client_meta(),
    )
    g.auth_cookie_issued = True
    resp = jsonify(_session_body(account, issued, message="Login successful"))
    return set_session_cookie(resp, issued)


@auth_bp.post("/logout")
@auth_bp.post("/logout/<slug>")
def logout(slug: str | None = None):
    if slug is not None:
        Role.from_slug(slug)
    logout_session(read_session_cookie(request))
    resp = jsonify({"success": True, "message": "Logged out successfully"})
    return clear_session_cookie(resp)


@auth_bp.get("/me")
@login_required_json
def me():
    session = g.auth_session
    return jsonify(
        _session_body(current_user._get_current_object(), sessionExpiresAt=session.expires_at.isoformat())
    )


@auth_bp.get("/session-status")
def session_status():
    if not current_user.is_authenticated:
        return jsonify({"success": True, "isAuthenticated": False, "userType": None, "user": None})
    session = g.auth_session
    return jsonify(
        {
            "success": True,
            "isAuthenticated": True,
            "userType": current_role().user_type,
            "user": serialize_account(current_user._get_current_object()),
            "expiresAt": session.expires_at.isoformat(),
        }
    )


@auth_bp.post("/refresh")
@login_required_json
def refresh():
    token = read_session_cookie(request)
    record = SessionManager().extend_session(token)
    if record is None:
        raise AuthenticationError()
    issued = IssuedSession(token=token, session=record)
    resp = jsonify({"success": True, "expiresAt": record.expires_at.isoformat()})
    return set_session_cookie(resp, issued)


@auth_bp.get("/<slug>/check-access")
@login_required_json
def check_access(slug: str):
    wanted = Role.from_slug(slug)
    role = current_role()
    is_admin = authorize(role, Role.ADMIN)
    return jsonify(
        {
            "success": True,
            "isAdmin": is_admin,
            "isSuperAdmin": role is Role.SUPERADMIN,
            "canAccessAdmin": is_admin,
            "hasAccess": authorize(role, wanted),
            "userType": role.user_type,
        }
    )


@auth_bp.put("/<slug>/update-profile")
def update_profile(slug: str):
    account = _account_for_route(slug)
    data = parse(UpdateProfileRequest)
    account = update_account_profile(account, data)
    return jsonify(_session_body(account, message="Profile updated successfully"))


@auth_bp.put("/<slug>/change-password")
@limiter.limit("5/minute")
def change_password(slug: str):
    account = _account_for_route(slug)
    data = parse(ChangePasswordRequest)
    revoked = change_account_password(
        account, data.old_password, data.new_password, keep_token=read_session_cookie(request)
    )
    return jsonify({"success": True, "message": "Password updated successfully", "revokedSessions": revoked})
