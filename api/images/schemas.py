"""
Pydantic schemas for listing images.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ImageUpload(BaseModel):
    # Base64 payload; a leading "data:<mime>;base64," prefix is accepted.
    base64: str = Field(..., min_length=1)
    filename: str = Field(..., min_length=1, max_length=255)
    mime_type: str = Field(..., min_length=1, max_length=100)


class ImageUploadRequest(BaseModel):
    images: list[ImageUpload] = Field(..., min_length=1, max_length=20)


class ImageResponse(BaseModel):
    id: int
    property_id: int
    url: str
    is_primary: bool
    sort_order: int
    created_at: datetime
