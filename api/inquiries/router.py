"""
Inquiry endpoints. Sending is public; reading is for listing owners.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.db import DatabaseHandle
from core.deps import get_db

from . import schemas, service

router = APIRouter()


@router.post("/inquiries", name="inquiry.create")
async def create_inquiry(
    payload: schemas.InquiryCreateRequest,
    db: DatabaseHandle = Depends(get_db),
    current_user: dict | None = Depends(auth_dependencies.get_optional_user),
) -> dict:
    sender_id = int(current_user["id"]) if current_user else None
    return await service.create(db, payload, sender_id=sender_id)


@router.get("/properties/{property_id}/inquiries", name="inquiry.forProperty")
async def property_inquiries(
    property_id: int,
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> list[schemas.InquiryResponse]:
    return await service.for_property(db, property_id, user_id=int(current_user["id"]))


@router.get("/inquiries/mine", name="inquiry.myInquiries")
async def my_inquiries(
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> list[schemas.ReceivedInquiryResponse]:
    return await service.received(db, user_id=int(current_user["id"]))


@router.get("/inquiries/unread-count", name="inquiry.unreadCount")
async def unread_count(
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.unread_count(db, user_id=int(current_user["id"]))


@router.post("/inquiries/{inquiry_id}/read", name="inquiry.markRead")
async def mark_read(
    inquiry_id: int,
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.mark_read(db, inquiry_id, user_id=int(current_user["id"]))
