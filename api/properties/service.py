"""
Property listing orchestration.

Create flow:
1) decode + validate images (before any write)
2) in one transaction: insert the property, upload blobs, insert image rows
3) on any failure the transaction rolls back and uploaded blobs are deleted
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from fastapi import HTTPException, status

from core.db import DatabaseHandle
from core.storage import StorageBackend
from images import repository as images_repository
from images import service as images_service

from . import repository, schemas

logger = logging.getLogger(__name__)

COORDINATE_QUANTUM = Decimal("1e-8")

# NOT NULL columns: an explicit null in an update means "leave as is".
_REQUIRED_FIELDS = {"title", "price", "property_type", "status", "location"}


def _decimal_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _normalize_fields(data: dict[str, Any]) -> dict[str, Any]:
    for name in ("latitude", "longitude"):
        if data.get(name) is not None:
            data[name] = Decimal(data[name]).quantize(COORDINATE_QUANTUM)
    for name in ("title", "location"):
        if isinstance(data.get(name), str):
            data[name] = data[name].strip()
    return data


def to_property_response(row: dict, images: list[dict] | None = None) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        "user_id": int(row["user_id"]),
        "title": row["title"],
        "description": row.get("description"),
        "price": _decimal_str(row["price"]),
        "property_type": row["property_type"],
        "status": row["status"],
        "bedrooms": row.get("bedrooms"),
        "bathrooms": row.get("bathrooms"),
        "area": _decimal_str(row.get("area")),
        "location": row["location"],
        "address": row.get("address"),
        "latitude": _decimal_str(row.get("latitude")),
        "longitude": _decimal_str(row.get("longitude")),
        "amenities": row.get("amenities"),
        "is_active": bool(row["is_active"]),
        "view_count": int(row.get("view_count") or 0),
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
        "images": [images_service.to_image_response(img) for img in images or []],
    }


async def with_images(db: DatabaseHandle, rows: list[dict]) -> list[dict[str, Any]]:
    """
    Shape listing rows for the client, loading all their images in one query.
    """
    grouped = await images_repository.list_images_for_properties(db, [int(r["id"]) for r in rows])
    return [to_property_response(row, grouped.get(int(row["id"]), [])) for row in rows]


async def get_owned_property(db: DatabaseHandle, property_id: int, *, user_id: int) -> dict:
    return await images_service.get_owned_property(db, property_id, user_id=user_id)


async def create(
    db: DatabaseHandle,
    storage: StorageBackend,
    payload: schemas.PropertyCreateRequest,
    *,
    user_id: int,
) -> dict:
    decoded = images_service.decode_images(payload.images or [])
    data = _normalize_fields(payload.model_dump(exclude={"images"}, exclude_none=True))

    uploaded: list[dict[str, Any]] = []
    try:
        async with db.transaction() as tx:
            property_id = await repository.create_property(tx, user_id=user_id, data=data)
            if decoded:
                uploaded = await images_service.upload_images(
                    storage,
                    property_id,
                    decoded,
                    start_order=0,
                    first_is_primary=True,
                )
                await images_repository.add_images(tx, uploaded)
    except Exception:
        if uploaded:
            await images_service.discard_blobs(storage, [r["file_key"] for r in uploaded])
        raise

    logger.info("property_created property_id=%s user_id=%s images=%s", property_id, user_id, len(uploaded))
    return {"success": True, "property_id": property_id}


async def update(
    db: DatabaseHandle,
    property_id: int,
    payload: schemas.PropertyUpdateRequest,
    *,
    user_id: int,
) -> dict:
    await get_owned_property(db, property_id, user_id=user_id)

    data = {
        name: value
        for name, value in payload.model_dump(exclude_unset=True).items()
        if not (value is None and name in _REQUIRED_FIELDS)
    }
    data = _normalize_fields(data)

    if data:
        await repository.update_property(db, property_id, user_id=user_id, data=data)
    return {"success": True}


async def get(db: DatabaseHandle, property_id: int) -> dict[str, Any]:
    """
    Public detail view. Every call counts as one view, the owner's included.
    """
    row = await repository.get_property_with_owner(db, property_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found.")

    await repository.increment_view_count(db, property_id)
    images = await images_repository.list_images(db, property_id)

    response = to_property_response(row, images)
    response["view_count"] += 1
    response["owner"] = None
    if row.get("owner_id") is not None:
        response["owner"] = {
            "id": int(row["owner_id"]),
            "name": row.get("owner_name"),
            "email": row.get("owner_email"),
            "phone": row.get("owner_phone"),
        }
    return response


async def my_listings(db: DatabaseHandle, *, user_id: int) -> list[dict[str, Any]]:
    rows = await repository.list_user_properties(db, user_id)
    return await with_images(db, rows)


async def search(
    db: DatabaseHandle,
    filters: repository.SearchFilters,
    *,
    limit: int,
    offset: int,
) -> dict[str, Any]:
    rows, total = await repository.search_properties(db, filters, limit=limit, offset=offset)
    return {"properties": await with_images(db, rows), "total": total}


async def featured(db: DatabaseHandle, *, limit: int) -> list[dict[str, Any]]:
    rows = await repository.featured_properties(db, limit=limit)
    return await with_images(db, rows)


async def set_active(db: DatabaseHandle, property_id: int, *, user_id: int, is_active: bool) -> dict:
    await get_owned_property(db, property_id, user_id=user_id)
    await repository.set_property_active(db, property_id, user_id=user_id, is_active=is_active)
    logger.info("property_visibility property_id=%s is_active=%s", property_id, is_active)
    return {"success": True}


async def for_map(db: DatabaseHandle) -> list[dict[str, Any]]:
    rows = await repository.properties_for_map(db)
    return [
        {
            "id": int(row["id"]),
            "title": row["title"],
            "price": _decimal_str(row["price"]),
            "property_type": row["property_type"],
            "status": row["status"],
            "bedrooms": row.get("bedrooms"),
            "bathrooms": row.get("bathrooms"),
            "location": row["location"],
            "latitude": _decimal_str(row["latitude"]),
            "longitude": _decimal_str(row["longitude"]),
        }
        for row in rows
    ]
