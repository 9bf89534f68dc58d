"""
Listing image orchestration.

Flow for an upload:
1) decode + validate every payload (nothing is stored if one is bad)
2) put all blobs concurrently
3) insert the rows
If a put fails, blobs that did land are deleted and the whole call fails.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any

from fastapi import HTTPException, status

from core import config
from core.db import DatabaseHandle
from core.storage import StorageBackend, StorageError, property_image_key
from properties import repository as property_repository

from . import repository, schemas

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}


@dataclass(frozen=True)
class DecodedImage:
    filename: str
    mime_type: str
    data: bytes


async def get_owned_property(db: DatabaseHandle, property_id: int, *, user_id: int) -> dict:
    """
    Load a listing the caller owns. A listing owned by someone else is
    reported exactly like a missing one.
    """
    row = await property_repository.get_property(db, property_id)
    if row is None or int(row["user_id"]) != int(user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found.")
    return row


def to_image_response(row: dict) -> schemas.ImageResponse:
    return schemas.ImageResponse(
        id=int(row["id"]),
        property_id=int(row["property_id"]),
        url=str(row["url"]),
        is_primary=bool(row["is_primary"]),
        sort_order=int(row["sort_order"]),
        created_at=row["created_at"],
    )


def _strip_data_url(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("data:") and "," in raw:
        return raw.split(",", 1)[1]
    return raw


def decode_images(images: list[schemas.ImageUpload]) -> list[DecodedImage]:
    max_bytes = config.max_image_bytes()
    decoded: list[DecodedImage] = []

    for img in images:
        mime_type = img.mime_type.strip().lower()
        if mime_type not in ALLOWED_IMAGE_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported image type '{img.mime_type}'. Allowed: {sorted(ALLOWED_IMAGE_TYPES)}",
            )

        try:
            data = base64.b64decode(_strip_data_url(img.base64), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid image data for '{img.filename}'.",
            ) from exc

        if not data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Image '{img.filename}' is empty.",
            )
        if len(data) > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Image '{img.filename}' is too large. Max is {max_bytes} bytes.",
            )

        decoded.append(DecodedImage(filename=img.filename, mime_type=mime_type, data=data))

    return decoded


async def discard_blobs(storage: StorageBackend, keys: list[str]) -> None:
    """
    Best-effort delete of blobs that no row will reference.
    """
    for key in keys:
        try:
            await storage.delete(key)
        except StorageError:
            logger.exception("blob_cleanup_failed key=%s", key)


async def upload_images(
    storage: StorageBackend,
    property_id: int,
    images: list[DecodedImage],
    *,
    start_order: int = 0,
    first_is_primary: bool = True,
) -> list[dict[str, Any]]:
    """
    Put every image and return the row dicts for `repository.add_images`,
    in input order: sort_order = start_order + index.
    """
    keys = [property_image_key(property_id, img.filename) for img in images]
    results = await asyncio.gather(
        *(storage.put(key, img.data, img.mime_type) for key, img in zip(keys, images)),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, BaseException)]
    if failures:
        stored = [key for key, r in zip(keys, results) if not isinstance(r, BaseException)]
        await discard_blobs(storage, stored)
        logger.error(
            "image_upload_failed property_id=%s failed=%s total=%s error=%s",
            property_id,
            len(failures),
            len(images),
            failures[0],
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload images.",
        ) from failures[0]

    return [
        {
            "property_id": property_id,
            "url": url,
            "file_key": key,
            "is_primary": first_is_primary and index == 0,
            "sort_order": start_order + index,
        }
        for index, (key, url) in enumerate(zip(keys, results))
    ]


async def store_new_images(
    db: DatabaseHandle,
    storage: StorageBackend,
    property_id: int,
    images: list[DecodedImage],
    *,
    start_order: int = 0,
    first_is_primary: bool = True,
) -> list[dict[str, Any]]:
    """
    Upload blobs and insert their rows; blobs are removed again if the insert fails.
    """
    records = await upload_images(
        storage,
        property_id,
        images,
        start_order=start_order,
        first_is_primary=first_is_primary,
    )
    try:
        await repository.add_images(db, records)
    except Exception:
        await discard_blobs(storage, [r["file_key"] for r in records])
        raise
    return records


async def upload(
    db: DatabaseHandle,
    storage: StorageBackend,
    property_id: int,
    payload: schemas.ImageUploadRequest,
    *,
    user_id: int,
) -> dict:
    await get_owned_property(db, property_id, user_id=user_id)
    decoded = decode_images(payload.images)

    existing = await repository.count_images(db, property_id)
    records = await store_new_images(
        db,
        storage,
        property_id,
        decoded,
        start_order=existing,
        first_is_primary=existing == 0,
    )
    return {"success": True, "count": len(records)}


async def delete(
    db: DatabaseHandle,
    storage: StorageBackend,
    property_id: int,
    image_id: int,
    *,
    user_id: int,
) -> dict:
    await get_owned_property(db, property_id, user_id=user_id)

    row = await repository.delete_image(db, image_id, property_id=property_id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found.")

    await discard_blobs(storage, [str(row["file_key"])])
    return {"success": True}


async def set_primary(db: DatabaseHandle, property_id: int, image_id: int, *, user_id: int) -> dict:
    await get_owned_property(db, property_id, user_id=user_id)

    if not await repository.set_primary_image(db, image_id, property_id=property_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found.")
    return {"success": True}
