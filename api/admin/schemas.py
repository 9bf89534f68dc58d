"""
Admin user-management schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from core.enums import UserRole


class AdminUserCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str | None = Field(default=None, min_length=8, max_length=128)
    role: UserRole = "user"
    phone: str | None = Field(default=None, max_length=32)


class AdminUserUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)
    role: UserRole | None = None
    phone: str | None = Field(default=None, max_length=32)


class RoleUpdateRequest(BaseModel):
    role: UserRole


class AdminUserResponse(BaseModel):
    id: int
    open_id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    login_method: str | None = None
    role: UserRole
    is_immutable: bool
    created_at: datetime
    last_signed_in: datetime
