"""Pydantic schemas for the user API. Field rules only; password confirmation is checked by the pipeline."""

import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from user_audit.domain.models.user import UserRecord
from user_audit.security.rbac import Role

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_NO_SPACES_RE = re.compile(r"^\S+$")


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:].lower()


def _check_name(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None:
        return value
    if not _NO_SPACES_RE.match(value):
        raise ValueError(f"The {field_name} must not contain spaces")
    return _capitalize(value)


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().lower()
    if not _EMAIL_RE.match(value):
        raise ValueError("email must be a valid address")
    return value


def _check_password(value: Optional[str]) -> Optional[str]:
    """Same rule for password and its confirmation: no spaces; upper, lower, and a digit or symbol."""
    if value is None:
        return value
    if not _NO_SPACES_RE.match(value):
        raise ValueError("password must not contain spaces")
    has_upper = any(c.isupper() for c in value)
    has_lower = any(c.islower() for c in value)
    has_digit_or_symbol = any(c.isdigit() or not c.isalnum() for c in value)
    if not (has_upper and has_lower and has_digit_or_symbol):
        raise ValueError(
            "password must contain an uppercase letter, a lowercase letter and a number or symbol"
        )
    return value


def _normalize_roles(value: Any) -> Any:
    if value is None:
        return value
    if isinstance(value, str):
        return [value.upper()]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [v.upper() if isinstance(v, str) else v for v in value]
    return value


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class CreateUserRequest(BaseModel):
    """Request schema for creating a user. Roles default to [USER]."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=2)
    lastname: str = Field(..., min_length=2)
    email: str
    password: str = Field(..., min_length=6)
    confirm_password: str = Field(..., min_length=6, alias="confirmPassword")
    roles: List[Role] = Field(default_factory=lambda: [Role.USER])
    is_active: bool = Field(True, alias="isActive")

    @field_validator("name")
    @classmethod
    def name_rules(cls, v: str) -> str:
        return _check_name(v, "name")

    @field_validator("lastname")
    @classmethod
    def lastname_rules(cls, v: str) -> str:
        return _check_name(v, "lastname")

    @field_validator("email")
    @classmethod
    def email_rules(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password", "confirm_password")
    @classmethod
    def password_rules(cls, v: str) -> str:
        return _check_password(v)

    @field_validator("roles", mode="before")
    @classmethod
    def roles_upper(cls, v: Any) -> Any:
        return _normalize_roles(v) or [Role.USER]


class UpdateUserRequest(BaseModel):
    """Partial update. A password change requires both password and confirm_password."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=2)
    lastname: Optional[str] = Field(None, min_length=2)
    email: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)
    confirm_password: Optional[str] = Field(None, min_length=6, alias="confirmPassword")
    roles: Optional[List[Role]] = Field(None, min_length=1)
    is_active: Optional[bool] = Field(None, alias="isActive")

    @field_validator("name")
    @classmethod
    def name_rules(cls, v: Optional[str]) -> Optional[str]:
        return _check_name(v, "name")

    @field_validator("lastname")
    @classmethod
    def lastname_rules(cls, v: Optional[str]) -> Optional[str]:
        return _check_name(v, "lastname")

    @field_validator("email")
    @classmethod
    def email_rules(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)

    @field_validator("password", "confirm_password")
    @classmethod
    def password_rules(cls, v: Optional[str]) -> Optional[str]:
        return _check_password(v)

    @field_validator("roles", mode="before")
    @classmethod
    def roles_upper(cls, v: Any) -> Any:
        return _normalize_roles(v)


class PaginationParams(BaseModel):
    limit: Optional[int] = Field(None, ge=1)
    offset: int = Field(0, ge=0)


# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    """Public representation of a user. Never carries the password hash."""

    id: str
    name: str
    lastname: Optional[str] = None
    email: str
    roles: List[Role]
    is_active: bool

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserResponse":
        return cls(
            id=record.id,
            name=record.name,
            lastname=record.lastname,
            email=record.email,
            roles=sorted(record.roles, key=lambda r: r.value),
            is_active=record.is_active,
        )
