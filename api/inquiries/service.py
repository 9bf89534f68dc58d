"""
Inquiry orchestration.

Create flow:
1) load the listing with its owner (404 if missing)
2) insert the inquiry
3) e-mail the owner when they have an address on file; a failed
   notification is logged and never fails the inquiry
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from core import notify
from core.db import DatabaseHandle
from images import service as images_service
from properties import repository as property_repository

from . import repository, schemas

logger = logging.getLogger(__name__)


def to_inquiry_response(row: dict) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        "property_id": int(row["property_id"]),
        "sender_id": int(row["sender_id"]) if row.get("sender_id") is not None else None,
        "sender_name": row["sender_name"],
        "sender_email": row["sender_email"],
        "sender_phone": row.get("sender_phone"),
        "message": row["message"],
        "is_read": bool(row["is_read"]),
        "created_at": row["created_at"],
    }


def notification_text(*, property_row: dict, payload: schemas.InquiryCreateRequest) -> tuple[str, str]:
    subject = f"New Inquiry for: {property_row['title']}"
    text = (
        f"You have received a new inquiry from {payload.sender_name} ({payload.sender_email}).\n\n"
        f"Message: {payload.message}\n\n"
        f"Property: {property_row['title']}\n"
        f"Location: {property_row['location']}"
    )
    return subject, text


async def _notify_owner(property_row: dict, payload: schemas.InquiryCreateRequest) -> None:
    owner_email = (property_row.get("owner_email") or "").strip()
    if not owner_email:
        return None

    subject, text = notification_text(property_row=property_row, payload=payload)
    try:
        await notify.send_email(to_email=owner_email, subject=subject, text=text)
    except notify.NotificationError:
        logger.exception("inquiry_notification_failed property_id=%s", property_row["id"])


async def create(db: DatabaseHandle, payload: schemas.InquiryCreateRequest, *, sender_id: int | None) -> dict:
    property_row = await property_repository.get_property_with_owner(db, payload.property_id)
    if property_row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found.")

    inquiry_id = await repository.create_inquiry(
        db,
        property_id=payload.property_id,
        sender_id=sender_id,
        sender_name=payload.sender_name.strip(),
        sender_email=str(payload.sender_email),
        sender_phone=payload.sender_phone,
        message=payload.message,
    )
    logger.info("inquiry_created inquiry_id=%s property_id=%s anonymous=%s", inquiry_id, payload.property_id, sender_id is None)

    await _notify_owner(property_row, payload)
    return {"id": inquiry_id}


async def for_property(db: DatabaseHandle, property_id: int, *, user_id: int) -> list[dict[str, Any]]:
    await images_service.get_owned_property(db, property_id, user_id=user_id)
    rows = await repository.list_property_inquiries(db, property_id)
    return [to_inquiry_response(row) for row in rows]


async def received(db: DatabaseHandle, *, user_id: int) -> list[dict[str, Any]]:
    rows = await repository.list_received_inquiries(db, user_id)
    out: list[dict[str, Any]] = []
    for row in rows:
        item = to_inquiry_response(row)
        item["property"] = {"id": int(row["property_id"]), "title": row["property_title"]}
        out.append(item)
    return out


async def mark_read(db: DatabaseHandle, inquiry_id: int, *, user_id: int) -> dict:
    if not await repository.mark_read(db, inquiry_id, owner_id=user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inquiry not found.")
    return {"success": True}


async def unread_count(db: DatabaseHandle, *, user_id: int) -> dict:
    return {"count": await repository.unread_count(db, user_id)}
