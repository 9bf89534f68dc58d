"""
Listing image persistence.

Every statement is scoped by property id so an image id from another
listing never matches.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from core.db import DatabaseHandle

IMAGE_COLUMNS = "id, property_id, url, file_key, is_primary, sort_order, created_at"


async def add_images(db: DatabaseHandle, records: list[dict[str, Any]]) -> None:
    """
    Bulk insert image rows: dicts with property_id, url, file_key, is_primary, sort_order.
    """
    if not records:
        return None

    await db.execute_many(
        """
        INSERT INTO property_images (property_id, url, file_key, is_primary, sort_order)
        VALUES ($1, $2, $3, $4, $5)
        """,
        [
            (r["property_id"], r["url"], r["file_key"], bool(r["is_primary"]), int(r["sort_order"]))
            for r in records
        ],
    )


async def list_images(db: DatabaseHandle, property_id: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {IMAGE_COLUMNS}
        FROM property_images
        WHERE property_id = $1
        ORDER BY sort_order, id
        """,
        property_id,
    )


async def list_images_for_properties(db: DatabaseHandle, property_ids: list[int]) -> dict[int, list[dict]]:
    """
    Images for many listings in one query, grouped by property id.
    """
    grouped: dict[int, list[dict]] = defaultdict(list)
    if not property_ids:
        return grouped

    rows = await db.fetch_all(
        f"""
        SELECT {IMAGE_COLUMNS}
        FROM property_images
        WHERE property_id = ANY($1::bigint[])
        ORDER BY property_id, sort_order, id
        """,
        list(property_ids),
    )
    for row in rows:
        grouped[int(row["property_id"])].append(row)
    return grouped


async def count_images(db: DatabaseHandle, property_id: int) -> int:
    n = await db.fetch_val(
        "SELECT count(*) FROM property_images WHERE property_id = $1",
        property_id,
    )
    return int(n or 0)


async def delete_image(db: DatabaseHandle, image_id: int, *, property_id: int) -> dict | None:
    """
    Delete one image row. Returns the deleted row (with its storage key), or
    None when the image is not part of this property.
    """
    return await db.execute_returning(
        f"""
        DELETE FROM property_images
        WHERE id = $1
          AND property_id = $2
        RETURNING {IMAGE_COLUMNS}
        """,
        image_id,
        property_id,
    )


async def set_primary_image(db: DatabaseHandle, image_id: int, *, property_id: int) -> bool:
    """
    Flag `image_id` as the only primary image of the property.

    Single statement: clearing and setting happen together, and nothing
    changes when the image does not belong to the property.
    """
    changed = await db.execute(
        """
        UPDATE property_images
        SET is_primary = (id = $1)
        WHERE property_id = $2
          AND EXISTS (
            SELECT 1
            FROM property_images target
            WHERE target.id = $1
              AND target.property_id = $2
          )
        """,
        image_id,
        property_id,
    )
    return changed > 0
