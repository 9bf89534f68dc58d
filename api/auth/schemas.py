"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from core.enums import UserRole


class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseModel):
    id: int
    open_id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    login_method: str | None = None
    role: UserRole
    is_immutable: bool = False
    created_at: datetime
    last_signed_in: datetime


class AdminLoginResponse(BaseModel):
    success: bool = True
    user: UserResponse
