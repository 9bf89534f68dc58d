"""
AI description draft schemas.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from core.enums import ListingStatus, PropertyType
from properties.schemas import MAX_ROOMS


class DescriptionRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    property_type: PropertyType
    status: ListingStatus
    location: str = Field(..., min_length=1, max_length=255)
    bedrooms: int | None = Field(default=None, ge=0, le=MAX_ROOMS)
    bathrooms: int | None = Field(default=None, ge=0, le=MAX_ROOMS)
    area: Decimal | None = Field(default=None, gt=0)
    amenities: str | None = Field(default=None, max_length=2000)
    additional_info: str | None = Field(default=None, max_length=2000)


class DescriptionResponse(BaseModel):
    description: str
