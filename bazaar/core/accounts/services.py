"""Account persistence rules: creation, profile edits, status changes."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError

from bazaar.core.accounts.models import Account
from bazaar.core.auth.constants import (
    ACCOUNT_STATUS_ACTIVE,
    ACCOUNT_STATUS_DEACTIVATED,
    PHONE_NUMBER_PATTERN,
    REVOKE_REASON_DEACTIVATED,
    REVOKE_REASON_PASSWORD_CHANGED,
)
from bazaar.core.auth.events import (
    ACCOUNT_DEACTIVATED,
    ACCOUNT_PASSWORD_CHANGED,
    ACCOUNT_PROFILE_UPDATED,
    ACCOUNT_REGISTERED,
    ACCOUNT_RESTORED,
)
from bazaar.core.auth.password import hash_password, verify_password
from bazaar.core.auth.roles import (
    ALL_PERMISSIONS,
    DEFAULT_ADMIN_PERMISSIONS,
    PERM_MANAGE_SELLERS,
    PERM_MANAGE_USERS,
    Role,
    has_permission,
)
from bazaar.core.auth.schemas import CreateAdminRequest, UpdateProfileRequest, normalize_login_key
from bazaar.core.auth.session_services import SessionManager
from bazaar.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from bazaar.core.events.event_service import log_event
from bazaar.core.utils.pagination import paginate
from bazaar.extensions import db

logger = logging.getLogger(__name__)

_PHONE_REGEX = re.compile(PHONE_NUMBER_PATTERN)
_EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Capability an admin needs to act on an account of the given role.
_TARGET_CAPABILITY = {
    Role.CUSTOMER: PERM_MANAGE_USERS,
    Role.SELLER: PERM_MANAGE_SELLERS,
}


def find_by_login_key(login_key: str) -> Optional[Account]:
    """Lookup across every role; login keys share one namespace."""
    return Account.query.filter_by(login_key=normalize_login_key(login_key)).first()


def get_account(account_id: str) -> Account:
    account = db.session.get(Account, account_id)
    if account is None:
        raise NotFoundError("Account not found")
    return account


def _validate_login_key(role: Role, login_key: str) -> str:
    key = normalize_login_key(login_key)
    if role.is_admin_kind:
        if not _EMAIL_REGEX.match(key) and not _PHONE_REGEX.match(key):
            raise ValidationError("Please provide a valid email address")
    elif not _PHONE_REGEX.match(key):
        raise ValidationError("Please provide a valid 10-digit phone number")
    return key


def _write_unique(account: Account, **changes) -> None:
    """Add ``account`` and apply ``changes`` inside a savepoint; a unique-key violation is a conflict."""
    try:
        with db.session.begin_nested():
            db.session.add(account)
            for attr, value in changes.items():
                setattr(account, attr, value)
    except IntegrityError as exc:
        logger.info("login key conflict on write role=%s", account.role)
        raise ConflictError() from exc


def register_account(
    role: Role | str,
    *,
    login_key: str,
    password: str,
    display_name: str,
    email: Optional[str] = None,
    avatar: Optional[str] = None,
    address: Optional[str] = None,
    zip_code: Optional[str] = None,
    permissions: Optional[Iterable[str]] = None,
    created_by: Optional[Account] = None,
) -> Account:
    """Create an account of any role. The only code path that inserts accounts.

    The lookup is an early exit; the unique index on ``login_key`` decides
    concurrent races. Commits on success.
    """
    role = Role(role)
    key = _validate_login_key(role, login_key)
    if not (display_name or "").strip():
        raise ValidationError("Name is required")
    if role is Role.SELLER and not ((address or "").strip() and (zip_code or "").strip()):
        raise ValidationError("Address and zip code are required for sellers")

    if find_by_login_key(key) is not None:
        raise ConflictError()

    if role is Role.SUPERADMIN:
        granted = list(ALL_PERMISSIONS)
    elif role is Role.ADMIN:
        granted = list(permissions) if permissions is not None else list(DEFAULT_ADMIN_PERMISSIONS)
    else:
        granted = []

    account = Account(
        display_name=display_name.strip(),
        login_key=key,
        email=email,
        password_hash=hash_password(password),
        role=role.value,
        status=ACCOUNT_STATUS_ACTIVE,
        avatar=avatar,
        address=address.strip() if role is Role.SELLER else None,
        zip_code=zip_code.strip() if role is Role.SELLER else None,
        permissions=granted,
        created_by_id=created_by.id if created_by else None,
    )
    _write_unique(account)
    log_event(
        ACCOUNT_REGISTERED,
        {"account_id": account.id, "role": account.role, "created_by_id": account.created_by_id},
        account_id=account.id,
    )
    db.session.commit()
    logger.info("account registered id=%s role=%s", account.id, account.role)
    return account


def update_profile(account: Account, payload: UpdateProfileRequest) -> Account:
    """Apply profile edits. Changing the login key needs the current password."""
    role = account.role_enum
    changed: list[str] = []

    if payload.name is not None and payload.name != account.display_name:
        account.display_name = payload.name
        changed.append("name")
    if payload.email is not None and payload.email != account.email:
        account.email = payload.email
        changed.append("email")
    if payload.avatar is not None and payload.avatar != account.avatar:
        account.avatar = payload.avatar
        changed.append("avatar")
    if role is Role.SELLER:
        if payload.address is not None and payload.address != account.address:
            account.address = payload.address
            changed.append("address")
        if payload.zip_code is not None and payload.zip_code != account.zip_code:
            account.zip_code = payload.zip_code
            changed.append("zipCode")

    if payload.login_key and payload.login_key != account.login_key:
        if not payload.password:
            raise ValidationError("Current password is required to change your login")
        if not verify_password(payload.password, account.password_hash):
            raise ValidationError("Please provide the correct information")
        new_key = _validate_login_key(role, payload.login_key)
        existing = find_by_login_key(new_key)
        if existing is not None and existing.id != account.id:
            raise ConflictError()
        _write_unique(account, login_key=new_key)
        changed.append("loginKey")

    if not changed:
        return account

    log_event(ACCOUNT_PROFILE_UPDATED, {"account_id": account.id, "fields": changed}, account_id=account.id)
    db.session.commit()
    logger.info("profile updated id=%s fields=%s", account.id, ",".join(changed))
    return account


def change_password(
    account: Account,
    old_password: str,
    new_password: str,
    *,
    keep_token: Optional[str] = None,
    sessions: Optional[SessionManager] = None,
) -> int:
    """Rotate the password and revoke every other session. Returns the revoked count."""
    if not verify_password(old_password, account.password_hash):
        raise ValidationError("Old password is incorrect")
    account.password_hash = hash_password(new_password)
    sessions = sessions or SessionManager()
    revoked = sessions.revoke_account_sessions(
        account.id, reason=REVOKE_REASON_PASSWORD_CHANGED, except_token=keep_token, commit=False
    )
    log_event(ACCOUNT_PASSWORD_CHANGED, {"account_id": account.id, "revoked_sessions": revoked}, account_id=account.id)
    db.session.commit()
    logger.info("password changed id=%s revoked_sessions=%d", account.id, revoked)
    return revoked


def _ensure_can_manage(actor: Account, target: Account) -> None:
    target_role = target.role_enum
    if target_role.is_admin_kind:
        if actor.role_enum is not Role.SUPERADMIN:
            raise AuthorizationError("Only a super admin can manage admin accounts")
        return
    capability = _TARGET_CAPABILITY[target_role]
    if not has_permission(actor.role, actor.permissions, capability):
        raise AuthorizationError()


def deactivate_account(actor: Account, account_id: str, *, sessions: Optional[SessionManager] = None) -> Account:
    target = get_account(account_id)
    if target.id == actor.id:
        raise AuthorizationError("You cannot deactivate your own account")
    if target.role_enum is Role.SUPERADMIN:
        raise AuthorizationError("Super admin accounts cannot be deactivated")
    _ensure_can_manage(actor, target)
    if target.status == ACCOUNT_STATUS_DEACTIVATED:
        return target

    target.status = ACCOUNT_STATUS_DEACTIVATED
    sessions = sessions or SessionManager()
    revoked = sessions.revoke_account_sessions(target.id, reason=REVOKE_REASON_DEACTIVATED, commit=False)
    log_event(
        ACCOUNT_DEACTIVATED,
        {"account_id": target.id, "actor_id": actor.id, "revoked_sessions": revoked},
        account_id=target.id,
    )
    db.session.commit()
    logger.warning("account deactivated id=%s by=%s", target.id, actor.id)
    return target


def restore_account(actor: Account, account_id: str) -> Account:
    target = get_account(account_id)
    _ensure_can_manage(actor, target)
    if target.status == ACCOUNT_STATUS_ACTIVE:
        return target
    target.status = ACCOUNT_STATUS_ACTIVE
    target.failed_login_attempts = 0
    target.locked_until = None
    log_event(ACCOUNT_RESTORED, {"account_id": target.id, "actor_id": actor.id}, account_id=target.id)
    db.session.commit()
    logger.info("account restored id=%s by=%s", target.id, actor.id)
    return target


def create_admin(actor: Optional[Account], payload: CreateAdminRequest) -> Account:
    return register_account(
        payload.role,
        login_key=payload.email,
        password=payload.password,
        display_name=payload.name,
        email=payload.email,
        permissions=payload.permissions,
        created_by=actor,
    )


def list_accounts(
    *,
    role: Optional[Iterable[Role]] = None,
    status: Optional[str] = None,
    page: int = 1,
    per_page: int = 20,
    serializer=None,
) -> dict:
    query = Account.query
    if role:
        query = query.filter(Account.role.in_([Role(r).value for r in role]))
    if status:
        if status not in (ACCOUNT_STATUS_ACTIVE, ACCOUNT_STATUS_DEACTIVATED):
            raise ValidationError("status must be active or deactivated")
        query = query.filter(Account.status == status)
    query = query.order_by(Account.created_at.desc(), Account.id)
    return paginate(query, page=page, per_page=per_page, serializer=serializer)


def unlock_admins(now: Optional[datetime] = None) -> int:
    """Clear lockout counters on every admin-kind account. Returns accounts touched."""
    now = now or datetime.utcnow()
    touched = 0
    admins = Account.query.filter(Account.role.in_([Role.ADMIN.value, Role.SUPERADMIN.value])).all()
    for admin in admins:
        if admin.failed_login_attempts or admin.locked_until:
            admin.failed_login_attempts = 0
            admin.locked_until = None
            touched += 1
    db.session.commit()
    logger.info("unlocked %d admin account(s) at %s", touched, now.isoformat())
    return touched


__all__ = [
    "find_by_login_key",
    "get_account",
    "register_account",
    "update_profile",
    "change_password",
    "deactivate_account",
    "restore_account",
    "create_admin",
    "list_accounts",
    "unlock_admins",
]
