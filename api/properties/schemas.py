"""
Pydantic schemas for property listings.

Decimal columns (price, area, coordinates) are accepted as numbers and
returned as strings so clients never see floating-point drift.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from core.enums import ListingStatus, PropertyType
from images.schemas import ImageResponse, ImageUpload

MAX_ROOMS = 1000


class PropertyFields(BaseModel):
    description: str | None = None
    bedrooms: int | None = Field(default=None, ge=0, le=MAX_ROOMS)
    bathrooms: int | None = Field(default=None, ge=0, le=MAX_ROOMS)
    area: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    address: str | None = None
    latitude: Decimal | None = Field(default=None, ge=-90, le=90)
    longitude: Decimal | None = Field(default=None, ge=-180, le=180)
    amenities: str | None = None


class PropertyCreateRequest(PropertyFields):
    title: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    property_type: PropertyType
    status: ListingStatus
    location: str = Field(..., min_length=1, max_length=255)
    images: list[ImageUpload] | None = Field(default=None, max_length=20)


class PropertyUpdateRequest(PropertyFields):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    price: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    property_type: PropertyType | None = None
    status: ListingStatus | None = None
    location: str | None = Field(default=None, min_length=1, max_length=255)


class OwnerSummary(BaseModel):
    id: int
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class PropertyResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: str | None = None
    price: str
    property_type: PropertyType
    status: ListingStatus
    bedrooms: int | None = None
    bathrooms: int | None = None
    area: str | None = None
    location: str
    address: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    amenities: str | None = None
    is_active: bool
    view_count: int
    created_at: datetime
    updated_at: datetime
    images: list[ImageResponse] = []


class PropertyDetailResponse(PropertyResponse):
    owner: OwnerSummary | None = None


class FavoritePropertyResponse(PropertyResponse):
    favorite_id: int


class SearchResponse(BaseModel):
    properties: list[PropertyResponse]
    total: int


class MapPropertyResponse(BaseModel):
    id: int
    title: str
    price: str
    property_type: PropertyType
    status: ListingStatus
    bedrooms: int | None = None
    bathrooms: int | None = None
    location: str
    latitude: str
    longitude: str
