"""Schemas for auth and account flows.

Request models accept the storefront's camelCase field names (``phoneNumber``,
``zipCode``, ``rememberMe``) as well as snake_case.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from bazaar.core.auth.constants import (
    MIN_PASSWORD_LENGTH,
    PHONE_NUMBER_PATTERN,
    SESSION_SCOPE_ALL,
    SESSION_SCOPE_SINGLE,
)
from bazaar.core.auth.roles import ALL_PERMISSIONS

if TYPE_CHECKING:
    from bazaar.core.accounts.models import Account

_PHONE_REGEX = re.compile(PHONE_NUMBER_PATTERN)


def normalize_login_key(value: str) -> str:
    """Phone numbers lose spaces; emails are lower-cased."""
    value = (value or "").strip()
    if "@" in value:
        return value.lower()
    return value.replace(" ", "")


def _check_phone(value: str) -> str:
    value = normalize_login_key(value)
    if not _PHONE_REGEX.match(value):
        raise ValueError("Please provide a valid 10-digit phone number")
    return value


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class RegisterCustomerRequest(_Request):
    name: str = Field(min_length=1, max_length=255)
    login_key: str = Field(validation_alias=AliasChoices("phoneNumber", "loginKey", "login_key"))
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = Field(default=None, max_length=512)
    remember_me: bool = Field(default=False, validation_alias=AliasChoices("rememberMe", "remember_me"))

    @field_validator("login_key")
    @classmethod
    def validate_login_key(cls, v: str) -> str:
        return _check_phone(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else None


class RegisterSellerRequest(RegisterCustomerRequest):
    address: str = Field(min_length=1, max_length=512)
    zip_code: str = Field(min_length=1, max_length=16, validation_alias=AliasChoices("zipCode", "zip_code"))


class LoginRequest(_Request):
    login_key: str = Field(min_length=1, validation_alias=AliasChoices("phoneNumber", "loginKey", "login_key", "email"))
    password: str = Field(min_length=1)
    remember_me: bool = Field(default=False, validation_alias=AliasChoices("rememberMe", "remember_me"))

    @field_validator("login_key")
    @classmethod
    def validate_login_key(cls, v: str) -> str:
        return _check_phone(v)


class AdminLoginRequest(LoginRequest):
    """Admins sign in with an email address; a phone number is also accepted."""

    @field_validator("login_key")
    @classmethod
    def validate_login_key(cls, v: str) -> str:
        v = normalize_login_key(v)
        if "@" in v:
            return v
        return _check_phone(v)


class UpdateProfileRequest(_Request):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = Field(default=None, max_length=512)
    login_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("phoneNumber", "loginKey", "login_key")
    )
    address: Optional[str] = Field(default=None, min_length=1, max_length=512)
    zip_code: Optional[str] = Field(
        default=None, min_length=1, max_length=16, validation_alias=AliasChoices("zipCode", "zip_code")
    )
    # Required only when the login key changes.
    password: Optional[str] = None

    @field_validator("login_key")
    @classmethod
    def validate_login_key(cls, v: Optional[str]) -> Optional[str]:
        return normalize_login_key(v) if v else None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else None


class ChangePasswordRequest(_Request):
    old_password: str = Field(min_length=1, validation_alias=AliasChoices("oldPassword", "old_password"))
    new_password: str = Field(
        min_length=MIN_PASSWORD_LENGTH, validation_alias=AliasChoices("newPassword", "new_password")
    )
    confirm_password: str = Field(validation_alias=AliasChoices("confirmPassword", "confirm_password"))

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        if value != info.data.get("new_password"):
            raise ValueError("Passwords do not match")
        return value


class CreateAdminRequest(_Request):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8)
    role: str = Field(default="admin")
    permissions: Optional[List[str]] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("admin", "superadmin"):
            raise ValueError("role must be admin or superadmin")
        return v

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        unknown = sorted(set(v) - set(ALL_PERMISSIONS))
        if unknown:
            raise ValueError(f"unknown permissions: {', '.join(unknown)}")
        return list(dict.fromkeys(v))


class SessionAdminResetRequest(_Request):
    """Admin-only session reset payload."""

    session_scope: str = Field(default=SESSION_SCOPE_ALL, validation_alias=AliasChoices("sessionScope", "session_scope"))
    session_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("sessionId", "session_id"))
    reason: str = Field(min_length=1, max_length=255)

    @field_validator("session_scope")
    @classmethod
    def validate_scope(cls, value: str) -> str:
        if value not in (SESSION_SCOPE_ALL, SESSION_SCOPE_SINGLE):
            raise ValueError("invalid_scope")
        return value

    @field_validator("session_id")
    @classmethod
    def ensure_session_id_when_single(cls, value: Optional[int], info: ValidationInfo):
        scope = info.data.get("session_scope")
        if scope == SESSION_SCOPE_SINGLE and value is None:
            raise ValueError("session_id_required")
        return value


class AccountListQuery(_Request):
    role: Optional[str] = None
    status: Optional[str] = None
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1, le=100, validation_alias=AliasChoices("perPage", "per_page"))


class AccountResponse(BaseModel):
    """Public view of an account. Password hashes and lockout counters never appear here."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    login_key: str = Field(serialization_alias="loginKey")
    phone_number: Optional[str] = Field(default=None, serialization_alias="phoneNumber")
    email: Optional[str] = None
    role: str
    status: str
    avatar: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = Field(default=None, serialization_alias="zipCode")
    permissions: Optional[List[str]] = None
    last_login_at: Optional[datetime] = Field(default=None, serialization_alias="lastLoginAt")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")


def serialize_account(account: "Account") -> dict:
    role = account.role_enum
    return AccountResponse(
        id=account.id,
        name=account.display_name,
        login_key=account.login_key,
        phone_number=None if "@" in account.login_key else account.login_key,
        email=account.email,
        role=account.role,
        status=account.status,
        avatar=account.avatar,
        address=account.address if role.value == "seller" else None,
        zip_code=account.zip_code if role.value == "seller" else None,
        permissions=list(account.permissions or []) if role.is_admin_kind else None,
        last_login_at=account.last_login_at,
        created_at=account.created_at,
    ).model_dump(mode="json", by_alias=True)
