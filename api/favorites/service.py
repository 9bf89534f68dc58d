"""
Favorites orchestration.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from core.db import DatabaseHandle
from images import repository as images_repository
from properties import repository as property_repository
from properties import service as property_service

from . import repository

logger = logging.getLogger(__name__)


async def toggle(db: DatabaseHandle, property_id: int, *, user_id: int) -> dict:
    if await property_repository.get_property(db, property_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found.")

    now_favorite = await repository.toggle_favorite(db, user_id=user_id, property_id=property_id)
    logger.info("favorite_toggled user_id=%s property_id=%s is_favorite=%s", user_id, property_id, now_favorite)
    return {"is_favorite": now_favorite}


async def list_favorites(db: DatabaseHandle, *, user_id: int) -> list[dict[str, Any]]:
    rows = await repository.list_favorite_properties(db, user_id)
    grouped = await images_repository.list_images_for_properties(db, [int(r["id"]) for r in rows])

    out: list[dict[str, Any]] = []
    for row in rows:
        item = property_service.to_property_response(row, grouped.get(int(row["id"]), []))
        item["favorite_id"] = int(row["favorite_id"])
        out.append(item)
    return out


async def favorite_ids(db: DatabaseHandle, *, user_id: int) -> list[int]:
    return await repository.list_favorite_ids(db, user_id)


async def check(db: DatabaseHandle, property_id: int, *, user_id: int) -> dict:
    return {"is_favorite": await repository.is_favorite(db, user_id=user_id, property_id=property_id)}
