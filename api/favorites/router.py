"""
Favorite endpoints (signed-in users only).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.db import DatabaseHandle
from core.deps import get_db
from properties import schemas as property_schemas

from . import service

router = APIRouter()


@router.post("/favorites/{property_id}/toggle", name="favorite.toggle")
async def toggle_favorite(
    property_id: int,
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.toggle(db, property_id, user_id=int(current_user["id"]))


@router.get("/favorites", name="favorite.list")
async def list_favorites(
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> list[property_schemas.FavoritePropertyResponse]:
    return await service.list_favorites(db, user_id=int(current_user["id"]))


@router.get("/favorites/ids", name="favorite.ids")
async def favorite_ids(
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> list[int]:
    return await service.favorite_ids(db, user_id=int(current_user["id"]))


@router.get("/favorites/{property_id}", name="favorite.check")
async def check_favorite(
    property_id: int,
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.check(db, property_id, user_id=int(current_user["id"]))
