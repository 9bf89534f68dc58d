"""
User persistence helpers (identity side).

Admin-side user management lives in `admin/repository.py`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from core import config
from core.db import DatabaseHandle
from core.enums import ADMIN_ROLES

USER_COLUMNS = """
    id, open_id, name, email, phone, password_hash, login_method, role,
    is_immutable, created_at, updated_at, last_signed_in
"""

# Profile columns an external login may overwrite.
_UPSERT_FIELDS = ("name", "email", "phone", "login_method", "role")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def normalize_email(email: str | None) -> str | None:
    if email is None:
        return None
    return email.strip().lower() or None


async def upsert_user(
    db: DatabaseHandle,
    *,
    open_id: str,
    name: str | None = UNSET,
    email: str | None = UNSET,
    phone: str | None = UNSET,
    login_method: str | None = UNSET,
    role: str | None = UNSET,
    last_signed_in: datetime | None = None,
) -> dict | None:
    """
    Insert a user by external id, or update the matching row.

    Only arguments that were passed overwrite existing values (None clears a
    column, UNSET leaves it alone). `last_signed_in` is refreshed every time.
    When no role is supplied and `open_id` is the configured owner identity,
    the role is forced to admin.
    """
    open_id = (open_id or "").strip()
    if not open_id:
        raise ValueError("open_id is required for upsert.")

    supplied: dict[str, Any] = {
        "name": name,
        "email": normalize_email(email) if email is not UNSET else UNSET,
        "phone": phone,
        "login_method": login_method,
        "role": role,
    }
    if role is UNSET and open_id == config.owner_open_id():
        supplied["role"] = "admin"

    columns = ["open_id"]
    args: list[Any] = [open_id]
    for field in _UPSERT_FIELDS:
        value = supplied[field]
        if value is UNSET:
            continue
        columns.append(field)
        args.append(value)

    columns.append("last_signed_in")
    args.append(last_signed_in or datetime.now(timezone.utc))

    placeholders = ", ".join(f"${i}" for i in range(1, len(args) + 1))
    updates = ", ".join(f"{col} = EXCLUDED.{col}" for col in columns[1:])

    return await db.execute_returning(
        f"""
        INSERT INTO users ({", ".join(columns)})
        VALUES ({placeholders})
        ON CONFLICT (open_id) DO UPDATE
        SET {updates}, updated_at = now()
        RETURNING {USER_COLUMNS}
        """,
        *args,
    )


async def get_user_by_id(db: DatabaseHandle, user_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE id = $1
        """,
        user_id,
    )


async def get_user_by_email(db: DatabaseHandle, email: str) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE lower(email) = lower($1)
        LIMIT 1
        """,
        normalize_email(email) or "",
    )


async def get_admin_by_email(db: DatabaseHandle, email: str) -> dict | None:
    """
    Password-capable account lookup for the admin console.
    """
    return await db.fetch_one(
        f"""
        SELECT {USER_COLUMNS}
        FROM users
        WHERE lower(email) = lower($1)
          AND role = ANY($2::user_role[])
        LIMIT 1
        """,
        normalize_email(email) or "",
        list(ADMIN_ROLES),
    )


async def touch_last_signed_in(db: DatabaseHandle, user_id: int) -> None:
    await db.execute(
        """
        UPDATE users
        SET last_signed_in = now()
        WHERE id = $1
        """,
        user_id,
    )
