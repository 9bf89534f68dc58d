"""
Property persistence (raw SQL).

Owner-scoped writes always carry `WHERE id = $1 AND user_id = $2`, so a
caller that does not own the row changes nothing.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from core.db import DatabaseHandle

PROPERTY_FIELDS = (
    "id",
    "user_id",
    "title",
    "description",
    "price",
    "property_type",
    "status",
    "bedrooms",
    "bathrooms",
    "area",
    "location",
    "address",
    "latitude",
    "longitude",
    "amenities",
    "is_active",
    "view_count",
    "created_at",
    "updated_at",
)

# Columns a listing owner may set on create/update.
WRITABLE_FIELDS = (
    "title",
    "description",
    "price",
    "property_type",
    "status",
    "bedrooms",
    "bathrooms",
    "area",
    "location",
    "address",
    "latitude",
    "longitude",
    "amenities",
)

DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_OFFSET = 10_000
DEFAULT_FEATURED_LIMIT = 6


def _columns(alias: str = "") -> str:
    prefix = f"{alias}." if alias else ""
    return ", ".join(f"{prefix}{name}" for name in PROPERTY_FIELDS)


def _writable(data: dict[str, Any]) -> list[tuple[str, Any]]:
    return [(name, data[name]) for name in WRITABLE_FIELDS if name in data]


def escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class SearchFilters:
    query: str | None = None
    status: str | None = None
    property_type: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    bedrooms: int | None = None


def build_search_filter(filters: SearchFilters) -> tuple[str, list[Any]]:
    """
    Conjunctive WHERE clause over active listings.

    Text matches case-insensitively as a substring of title, location or
    description. Price bounds are inclusive; bedrooms is a minimum.
    """
    conditions = ["is_active = true"]
    args: list[Any] = []

    def _param(value: Any) -> str:
        args.append(value)
        return f"${len(args)}"

    query = (filters.query or "").strip()
    if query:
        p = _param(f"%{escape_like(query)}%")
        conditions.append(f"(title ILIKE {p} OR location ILIKE {p} OR description ILIKE {p})")

    if filters.status is not None:
        conditions.append(f"status = {_param(filters.status)}")

    if filters.property_type is not None:
        conditions.append(f"property_type = {_param(filters.property_type)}")

    if filters.min_price is not None:
        conditions.append(f"price >= {_param(filters.min_price)}")

    if filters.max_price is not None:
        conditions.append(f"price <= {_param(filters.max_price)}")

    if filters.bedrooms is not None:
        conditions.append(f"bedrooms >= {_param(filters.bedrooms)}")

    return " AND ".join(conditions), args


async def create_property(db: DatabaseHandle, *, user_id: int, data: dict[str, Any]) -> int:
    pairs = _writable(data)
    columns = ["user_id"] + [name for name, _ in pairs]
    args = [user_id] + [value for _, value in pairs]
    placeholders = ", ".join(f"${i}" for i in range(1, len(args) + 1))

    row = await db.execute_returning(
        f"""
        INSERT INTO properties ({", ".join(columns)})
        VALUES ({placeholders})
        RETURNING id
        """,
        *args,
    )
    if row is None or "id" not in row:
        raise RuntimeError("Failed to insert property.")
    return int(row["id"])


async def update_property(db: DatabaseHandle, property_id: int, *, user_id: int, data: dict[str, Any]) -> int:
    """
    Update the given fields. Returns the number of rows changed (0 or 1).
    """
    pairs = _writable(data)
    args: list[Any] = [property_id, user_id]
    assignments = []
    for name, value in pairs:
        args.append(value)
        assignments.append(f"{name} = ${len(args)}")
    assignments.append("updated_at = now()")

    return await db.execute(
        f"""
        UPDATE properties
        SET {", ".join(assignments)}
        WHERE id = $1
          AND user_id = $2
        """,
        *args,
    )


async def set_property_active(db: DatabaseHandle, property_id: int, *, user_id: int, is_active: bool) -> int:
    return await db.execute(
        """
        UPDATE properties
        SET is_active = $3,
            updated_at = now()
        WHERE id = $1
          AND user_id = $2
        """,
        property_id,
        user_id,
        is_active,
    )


async def get_property(db: DatabaseHandle, property_id: int) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_columns()}
        FROM properties
        WHERE id = $1
        """,
        property_id,
    )


async def get_property_with_owner(db: DatabaseHandle, property_id: int) -> dict | None:
    """
    Property row plus `owner_*` contact columns (NULL when the owner row is gone).
    """
    return await db.fetch_one(
        f"""
        SELECT {_columns("p")},
               u.id AS owner_id,
               u.name AS owner_name,
               u.email AS owner_email,
               u.phone AS owner_phone
        FROM properties p
        LEFT JOIN users u ON u.id = p.user_id
        WHERE p.id = $1
        """,
        property_id,
    )


async def increment_view_count(db: DatabaseHandle, property_id: int) -> None:
    await db.execute(
        """
        UPDATE properties
        SET view_count = view_count + 1
        WHERE id = $1
        """,
        property_id,
    )


async def list_user_properties(db: DatabaseHandle, user_id: int) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_columns()}
        FROM properties
        WHERE user_id = $1
        ORDER BY created_at DESC, id DESC
        """,
        user_id,
    )


async def search_properties(
    db: DatabaseHandle,
    filters: SearchFilters,
    *,
    limit: int = DEFAULT_SEARCH_LIMIT,
    offset: int = 0,
) -> tuple[list[dict], int]:
    """
    Return (page of rows newest first, total matching rows).

    The page and the count are separate concurrent queries over the same
    filter, so they are not a consistent snapshot.
    """
    where_sql, args = build_search_filter(filters)
    n = len(args)

    rows, total = await asyncio.gather(
        db.fetch_all(
            f"""
            SELECT {_columns()}
            FROM properties
            WHERE {where_sql}
            ORDER BY created_at DESC, id DESC
            LIMIT ${n + 1}
            OFFSET ${n + 2}
            """,
            *args,
            limit,
            offset,
        ),
        db.fetch_val(
            f"""
            SELECT count(*)
            FROM properties
            WHERE {where_sql}
            """,
            *args,
        ),
    )
    return rows, int(total or 0)


async def featured_properties(db: DatabaseHandle, *, limit: int = DEFAULT_FEATURED_LIMIT) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {_columns()}
        FROM properties
        WHERE is_active = true
        ORDER BY view_count DESC, created_at DESC, id DESC
        LIMIT $1
        """,
        limit,
    )


async def properties_for_map(db: DatabaseHandle) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, title, price, property_type, status, bedrooms, bathrooms,
               location, latitude, longitude
        FROM properties
        WHERE is_active = true
          AND latitude IS NOT NULL
          AND longitude IS NOT NULL
        ORDER BY id
        """
    )
