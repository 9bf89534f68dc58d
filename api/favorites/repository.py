"""
Favorite persistence.

Toggling is two single statements against the unique (user_id, property_id)
pair: delete if present, otherwise insert. Concurrent toggles can never
leave a duplicate row behind.
"""

from __future__ import annotations

from core.db import DatabaseHandle
from properties.repository import PROPERTY_FIELDS


async def toggle_favorite(db: DatabaseHandle, *, user_id: int, property_id: int) -> bool:
    """
    Flip membership. Returns True when the property is now a favorite.
    """
    removed = await db.execute_returning(
        """
        DELETE FROM favorites
        WHERE user_id = $1
          AND property_id = $2
        RETURNING id
        """,
        user_id,
        property_id,
    )
    if removed is not None:
        return False

    await db.execute(
        """
        INSERT INTO favorites (user_id, property_id)
        VALUES ($1, $2)
        ON CONFLICT (user_id, property_id) DO NOTHING
        """,
        user_id,
        property_id,
    )
    return True


async def list_favorite_properties(db: DatabaseHandle, user_id: int) -> list[dict]:
    """
    Favorited listings, most recently favorited first, with `favorite_id`.
    """
    columns = ", ".join(f"p.{name}" for name in PROPERTY_FIELDS)
    return await db.fetch_all(
        f"""
        SELECT f.id AS favorite_id, {columns}
        FROM favorites f
        JOIN properties p ON p.id = f.property_id
        WHERE f.user_id = $1
        ORDER BY f.created_at DESC, f.id DESC
        """,
        user_id,
    )


async def list_favorite_ids(db: DatabaseHandle, user_id: int) -> list[int]:
    rows = await db.fetch_all(
        """
        SELECT property_id
        FROM favorites
        WHERE user_id = $1
        ORDER BY created_at DESC, id DESC
        """,
        user_id,
    )
    return [int(r["property_id"]) for r in rows]


async def is_favorite(db: DatabaseHandle, *, user_id: int, property_id: int) -> bool:
    found = await db.fetch_val(
        """
        SELECT EXISTS (
          SELECT 1
          FROM favorites
          WHERE user_id = $1
            AND property_id = $2
        )
        """,
        user_id,
        property_id,
    )
    return bool(found)
