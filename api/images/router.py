"""
Listing image endpoints. All of them require the caller to own the listing.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.db import DatabaseHandle
from core.deps import get_db, get_storage
from core.storage import StorageBackend

from . import schemas, service

router = APIRouter()


@router.post("/properties/{property_id}/images", name="image.upload")
async def upload_images(
    property_id: int,
    payload: schemas.ImageUploadRequest,
    db: DatabaseHandle = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.upload(db, storage, property_id, payload, user_id=int(current_user["id"]))


@router.delete("/properties/{property_id}/images/{image_id}", name="image.delete")
async def delete_image(
    property_id: int,
    image_id: int,
    db: DatabaseHandle = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.delete(db, storage, property_id, image_id, user_id=int(current_user["id"]))


@router.post("/properties/{property_id}/images/{image_id}/primary", name="image.setPrimary")
async def set_primary_image(
    property_id: int,
    image_id: int,
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.set_primary(db, property_id, image_id, user_id=int(current_user["id"]))
