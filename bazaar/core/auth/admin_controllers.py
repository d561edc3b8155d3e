"""Admin account-management endpoints."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user

from bazaar.core.accounts.services import (
    create_admin,
    deactivate_account,
    get_account,
    list_accounts,
    restore_account,
)
from bazaar.core.auth.roles import PERM_MANAGE_SELLERS, PERM_MANAGE_USERS, Role, has_permission
from bazaar.core.auth.schemas import (
    AccountListQuery,
    CreateAdminRequest,
    SessionAdminResetRequest,
    serialize_account,
)
from bazaar.core.auth.session_services import SessionManager
from bazaar.core.errors import AuthorizationError, NotFoundError
from bazaar.core.utils.decorators import require_permission, require_roles
from bazaar.core.utils.validation import parse

admin_bp = Blueprint("auth_admin", __name__)

_LIST_CAPABILITY = {
    Role.CUSTOMER: PERM_MANAGE_USERS,
    Role.SELLER: PERM_MANAGE_SELLERS,
}


def _actor():
    return current_user._get_current_object()


def _listable_roles(actor) -> list[Role]:
    """Account kinds ``actor`` may see: admin kinds for superadmins only, the rest by capability."""
    if actor.role_enum is Role.SUPERADMIN:
        return list(Role)
    return [
        role
        for role, capability in _LIST_CAPABILITY.items()
        if has_permission(actor.role, actor.permissions, capability)
    ]


def _list_response(result: dict):
    return jsonify(
        {
            "success": True,
            "accounts": result["items"],
            "page": result["page"],
            "perPage": result["per_page"],
            "total": result["total"],
            "pages": result["pages"],
        }
    )


@admin_bp.get("/admin/accounts")
@require_permission(PERM_MANAGE_USERS, PERM_MANAGE_SELLERS)
def accounts():
    query = parse(AccountListQuery, request.args.to_dict())
    visible = _listable_roles(_actor())
    if query.role:
        wanted = Role.from_slug(query.role)
        if wanted not in visible:
            raise AuthorizationError()
        roles = [wanted]
    else:
        roles = visible
    result = list_accounts(
        role=roles,
        status=query.status,
        page=query.page,
        per_page=query.per_page,
        serializer=serialize_account,
    )
    return _list_response(result)


@admin_bp.post("/admin/accounts/<account_id>/deactivate")
@require_roles(Role.ADMIN)
def deactivate(account_id: str):
    account = deactivate_account(_actor(), account_id)
    return jsonify({"success": True, "message": "Account deactivated", "user": serialize_account(account)})


@admin_bp.post("/admin/accounts/<account_id>/restore")
@require_roles(Role.ADMIN)
def restore(account_id: str):
    account = restore_account(_actor(), account_id)
    return jsonify({"success": True, "message": "Account restored", "user": serialize_account(account)})


@admin_bp.post("/admin/accounts/<account_id>/sessions/reset")
@require_roles(Role.SUPERADMIN)
def reset_sessions(account_id: str):
    data = parse(SessionAdminResetRequest)
    result = SessionManager().admin_reset(
        account_id,
        session_scope=data.session_scope,
        session_id=data.session_id,
        reason=data.reason,
        initiated_by_admin_id=_actor().id,
    )
    return jsonify({"success": True, **result})


@admin_bp.get("/admin/list")
@require_roles(Role.SUPERADMIN)
def list_admins():
    query = parse(AccountListQuery, request.args.to_dict())
    result = list_accounts(
        role=[Role.ADMIN, Role.SUPERADMIN],
        status=query.status,
        page=query.page,
        per_page=query.per_page,
        serializer=serialize_account,
    )
    return _list_response(result)


@admin_bp.post("/admin/create")
@require_roles(Role.SUPERADMIN)
def create():
    data = parse(CreateAdminRequest)
    account = create_admin(_actor(), data)
    return jsonify({"success": True, "message": "Admin created", "user": serialize_account(account)}), 201


@admin_bp.delete("/admin/<account_id>")
@require_roles(Role.SUPERADMIN)
def delete_admin(account_id: str):
    target = get_account(account_id)
    if not target.role_enum.is_admin_kind:
        raise NotFoundError("Admin not found")
    account = deactivate_account(_actor(), account_id)
    return jsonify({"success": True, "message": "Admin deactivated", "user": serialize_account(account)})
