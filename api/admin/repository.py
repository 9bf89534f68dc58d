"""
Admin-side user management.

Guards (immutability, duplicate e-mail) are checked against a fresh read
of the target row on every call; the row is never trusted from a cache.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Any

import asyncpg

from auth import security
from auth.repository import USER_COLUMNS, get_user_by_email, get_user_by_id, normalize_email
from core import config
from core.db import DatabaseHandle

logger = logging.getLogger(__name__)

LIST_COLUMNS = "id, open_id, name, email, phone, login_method, role, is_immutable, created_at, last_signed_in"


class UserNotFoundError(LookupError):
    pass


class ImmutableUserError(PermissionError):
    pass


class DuplicateEmailError(ValueError):
    pass


def new_admin_open_id() -> str:
    return f"admin-created-{int(time.time() * 1000)}-{secrets.token_hex(3)}"


async def is_super_admin(db: DatabaseHandle, user_id: int) -> bool:
    found = await db.fetch_val(
        """
        SELECT EXISTS (
          SELECT 1 FROM users WHERE id = $1 AND role = 'superadmin'
        )
        """,
        user_id,
    )
    return bool(found)


async def is_user_immutable(db: DatabaseHandle, user_id: int) -> bool:
    found = await db.fetch_val(
        """
        SELECT EXISTS (
          SELECT 1 FROM users WHERE id = $1 AND is_immutable = true
        )
        """,
        user_id,
    )
    return bool(found)


async def list_users(db: DatabaseHandle) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {LIST_COLUMNS}
        FROM users
        ORDER BY created_at DESC, id DESC
        """
    )


async def create_user(
    db: DatabaseHandle,
    *,
    name: str,
    email: str,
    role: str,
    password: str | None = None,
    phone: str | None = None,
) -> int:
    email = normalize_email(email) or ""
    if await get_user_by_email(db, email) is not None:
        raise DuplicateEmailError(email)

    password_hash = security.hash_password(password) if password else None
    try:
        row = await db.execute_returning(
            """
            INSERT INTO users (open_id, name, email, phone, password_hash, role, is_immutable, last_signed_in)
            VALUES ($1, $2, $3, $4, $5, $6, false, now())
            RETURNING id
            """,
            new_admin_open_id(),
            name,
            email,
            phone,
            password_hash,
            role,
        )
    except asyncpg.UniqueViolationError as exc:
        raise DuplicateEmailError(email) from exc
    if row is None or "id" not in row:
        raise RuntimeError("Failed to insert user.")
    return int(row["id"])


async def update_user(db: DatabaseHandle, user_id: int, data: dict[str, Any]) -> None:
    """
    Apply `data` (name, email, phone, role, password) to a mutable user.

    Checks run in order: the user exists, is not immutable, and the new
    e-mail (if it changes) is not taken.
    """
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    if user["is_immutable"]:
        raise ImmutableUserError(user_id)

    updates: dict[str, Any] = {}
    for field in ("name", "phone", "role"):
        if field in data:
            updates[field] = data[field]

    if "email" in data and data["email"] is not None:
        email = normalize_email(data["email"])
        if email != normalize_email(user.get("email")):
            existing = await get_user_by_email(db, email or "")
            if existing is not None and int(existing["id"]) != int(user_id):
                raise DuplicateEmailError(email)
        updates["email"] = email

    if data.get("password"):
        updates["password_hash"] = security.hash_password(data["password"])

    if not updates:
        return None

    args: list[Any] = [user_id]
    assignments = []
    for name, value in updates.items():
        args.append(value)
        assignments.append(f"{name} = ${len(args)}")
    assignments.append("updated_at = now()")

    try:
        await db.execute(
            f"""
            UPDATE users
            SET {", ".join(assignments)}
            WHERE id = $1
              AND is_immutable = false
            """,
            *args,
        )
    except asyncpg.UniqueViolationError as exc:
        raise DuplicateEmailError(updates.get("email")) from exc


async def update_user_role(db: DatabaseHandle, user_id: int, role: str) -> None:
    if await is_user_immutable(db, user_id):
        raise ImmutableUserError(user_id)

    await db.execute(
        """
        UPDATE users
        SET role = $2,
            updated_at = now()
        WHERE id = $1
          AND is_immutable = false
        """,
        user_id,
        role,
    )


async def delete_user(db: DatabaseHandle, user_id: int) -> None:
    """
    Delete a mutable user. Listings, favorites and inquiries stay behind.
    """
    if await is_user_immutable(db, user_id):
        raise ImmutableUserError(user_id)

    await db.execute(
        """
        DELETE FROM users
        WHERE id = $1
          AND is_immutable = false
        """,
        user_id,
    )


async def ensure_super_admin(db: DatabaseHandle) -> dict | None:
    """
    Idempotently seed the configured super-admin account.

    The row is (re)forced to role superadmin, immutable, and the configured
    password on every start.
    """
    email = config.super_admin_email()
    password = config.super_admin_password()
    if not password:
        logger.warning("super_admin_bootstrap_skipped reason=SUPER_ADMIN_PASSWORD_not_set email=%s", email)
        return None

    password_hash = security.hash_password(password)
    existing = await get_user_by_email(db, email)

    if existing is None:
        row = await db.execute_returning(
            f"""
            INSERT INTO users (open_id, name, email, password_hash, role, is_immutable, last_signed_in)
            VALUES ($1, 'Super Admin', $2, $3, 'superadmin', true, now())
            RETURNING {USER_COLUMNS}
            """,
            f"superadmin-{int(time.time() * 1000)}",
            email,
            password_hash,
        )
        logger.info("super_admin_created email=%s", email)
        return row

    row = await db.execute_returning(
        f"""
        UPDATE users
        SET role = 'superadmin',
            is_immutable = true,
            password_hash = $2,
            updated_at = now()
        WHERE id = $1
        RETURNING {USER_COLUMNS}
        """,
        int(existing["id"]),
        password_hash,
    )
    logger.info("super_admin_updated email=%s", email)
    return row
