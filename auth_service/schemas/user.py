"""
schemas/user.py
---------------
Pydantic models for registration, login, user management and responses.

Security note:
  - The password (and its hash) is NEVER included in any response schema.
  - Passwords require min 8 chars and at most 72 UTF-8 bytes (bcrypt's input
    limit); enforce stronger rules in production.
"""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from auth_service.core.security import BCRYPT_MAX_BYTES, password_too_long
from auth_service.models.user import Role
from auth_service.schemas.common import CamelModel, normalize_email, strip_text


class UserRegister(CamelModel):
    """Self-registration. The account is always created as a customer."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=BCRYPT_MAX_BYTES)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return strip_text(v)

    @field_validator("email", mode="before")
    @classmethod
    def clean_email(cls, v):
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, v):
        if password_too_long(v):
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes long")
        return v


class UserCreate(UserRegister):
    """Used by admins to create a user with an explicit role and tenant."""
    role: Role
    tenant_id: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_tenant_for_role(self) -> "UserCreate":
        if self.role == Role.admin and self.tenant_id is not None:
            raise ValueError("Admin users cannot belong to a tenant")
        if self.role == Role.manager and self.tenant_id is None:
            raise ValueError("Manager users must belong to a tenant")
        return self


class UserUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[Role] = None
    tenant_id: Optional[int] = Field(None, ge=1)

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return strip_text(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def clean_email(cls, v):
        return normalize_email(v)


class UserRead(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    tenant_id: Optional[int] = None
    created_at: datetime
