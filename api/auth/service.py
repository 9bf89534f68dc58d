"""
Auth business logic.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import HTTPException, status

from core.db import DatabaseHandle

from . import oauth, repository, schemas, security

logger = logging.getLogger(__name__)


def to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=int(user_row["id"]),
        open_id=str(user_row["open_id"]),
        name=user_row.get("name"),
        email=user_row.get("email"),
        phone=user_row.get("phone"),
        login_method=user_row.get("login_method"),
        role=user_row["role"],
        is_immutable=bool(user_row.get("is_immutable", False)),
        created_at=user_row["created_at"],
        last_signed_in=user_row["last_signed_in"],
    )


def issue_session_token(user_row: dict) -> str:
    return security.build_session_token(
        user_id=int(user_row["id"]),
        open_id=str(user_row["open_id"]),
        name=user_row.get("name"),
    )


async def get_user_from_session_token(db: DatabaseHandle, token: str | None) -> dict | None:
    """
    Resolve the caller from a session cookie. Anything invalid is anonymous.
    """
    if not token:
        return None

    try:
        payload = security.decode_session_token(token)
    except security.AuthSecurityError:
        return None

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        return None

    return await repository.get_user_by_id(db, int(subject))


async def complete_external_login(db: DatabaseHandle, code: str) -> str:
    """
    Exchange an OAuth code, upsert the user by external id, return a session token.
    """
    try:
        identity = await oauth.exchange_code(code)
    except oauth.OAuthError as exc:
        logger.warning("external_login_failed error=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="External login failed.",
        ) from exc

    try:
        user_row = await repository.upsert_user(
            db,
            open_id=identity.open_id,
            name=identity.name,
            email=identity.email,
            login_method=identity.login_method,
        )
    except asyncpg.UniqueViolationError:
        # The e-mail already belongs to another account: sign in without claiming it.
        logger.warning("external_login_email_taken open_id=%s", identity.open_id)
        user_row = await repository.upsert_user(
            db,
            open_id=identity.open_id,
            name=identity.name,
            login_method=identity.login_method,
        )
    if user_row is None:
        raise RuntimeError("Failed to upsert user.")

    logger.info("external_login user_id=%s login_method=%s", user_row["id"], identity.login_method)
    return issue_session_token(user_row)


async def admin_login(db: DatabaseHandle, payload: schemas.AdminLoginRequest) -> tuple[schemas.UserResponse, str]:
    """
    Password login restricted to admin/superadmin accounts.
    """
    # Generic error: don't reveal whether the email exists or which check failed.
    auth_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid email or password.",
    )

    user_row = await repository.get_admin_by_email(db, payload.email)
    if user_row is None or not user_row.get("password_hash"):
        raise auth_error

    if not security.verify_password(payload.password, user_row["password_hash"]):
        raise auth_error

    await repository.touch_last_signed_in(db, int(user_row["id"]))
    logger.info("admin_login user_id=%s role=%s", user_row["id"], user_row["role"])
    return to_user_response(user_row), issue_session_token(user_row)
