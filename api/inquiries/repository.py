"""
Inquiry persistence.

"Received" queries join to properties and filter on the listing owner, so
an owner only ever sees or changes inquiries on their own listings.
"""

from __future__ import annotations

from core.db import DatabaseHandle

INQUIRY_COLUMNS = (
    "id",
    "property_id",
    "sender_id",
    "sender_name",
    "sender_email",
    "sender_phone",
    "message",
    "is_read",
    "created_at",
)


def _columns(alias: str = "") -> str:
    prefix = f"{alias}." if alias else ""
    return ", ".join(f"{prefix}{name}" for name in INQUIRY_COLUMNS)


async def create_inquiry(
    db: DatabaseHandle,
    *,
    property_id: int,
    sender_id: int | None,
    sender_name: str,
    sender_email: str,
    sender_phone: str | None,
    message: str,
) -> int:
    row = await db.execute_returning(
        """
        INSERT INTO inquiries (property_id, sender_id, sender_name, sender_email, sender_phone, message)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING id
        """,
        property_id,
        sender_id,
        sender_name,
        sender_email,
        sender_phone,
        message,
    )
    if row is None or "id" not in row:
        raise RuntimeError("Failed to insert inquiry.")
    return int(row["id"])


async def list_property_inquiries(db: DatabaseHandle, property_id: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_columns()}
        FROM inquiries
        WHERE property_id = $1
        ORDER BY created_at DESC, id DESC
        """,
        property_id,
    )


async def list_received_inquiries(db: DatabaseHandle, owner_id: int) -> list[dict]:
    """
    Inquiries on every listing the user owns, newest first, with the
    listing's id and title.
    """
    return await db.fetch_all(
        f"""
        SELECT {_columns("i")},
               p.title AS property_title
        FROM inquiries i
        JOIN properties p ON p.id = i.property_id
        WHERE p.user_id = $1
        ORDER BY i.created_at DESC, i.id DESC
        """,
        owner_id,
    )


async def mark_read(db: DatabaseHandle, inquiry_id: int, *, owner_id: int) -> bool:
    """
    Mark one inquiry read. False when it does not exist or is on a listing
    the user does not own.
    """
    row = await db.execute_returning(
        """
        UPDATE inquiries i
        SET is_read = true
        FROM properties p
        WHERE i.id = $1
          AND p.id = i.property_id
          AND p.user_id = $2
        RETURNING i.id
        """,
        inquiry_id,
        owner_id,
    )
    return row is not None


async def unread_count(db: DatabaseHandle, owner_id: int) -> int:
    n = await db.fetch_val(
        """
        SELECT count(*)
        FROM inquiries i
        JOIN properties p ON p.id = i.property_id
        WHERE p.user_id = $1
          AND i.is_read = false
        """,
        owner_id,
    )
    return int(n or 0)
