"""
Pydantic schemas for buyer inquiries.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class InquiryCreateRequest(BaseModel):
    property_id: int
    sender_name: str = Field(..., min_length=1, max_length=255)
    sender_email: EmailStr
    sender_phone: str | None = Field(default=None, max_length=32)
    message: str = Field(..., min_length=1)


class InquiryResponse(BaseModel):
    id: int
    property_id: int
    sender_id: int | None = None
    sender_name: str
    sender_email: str
    sender_phone: str | None = None
    message: str
    is_read: bool
    created_at: datetime


class InquiryPropertySummary(BaseModel):
    id: int
    title: str


class ReceivedInquiryResponse(InquiryResponse):
    property: InquiryPropertySummary
