"""
Property listing endpoints.

Fixed paths (/properties/search, /featured, /map, /mine) are declared before
/properties/{property_id} so they are not captured as ids.
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.db import DatabaseHandle
from core.deps import get_db, get_storage
from core.enums import ListingStatus, PropertyType
from core.storage import StorageBackend

from . import repository, schemas, service

router = APIRouter()


@router.post("/properties", name="property.create")
async def create_property(
    payload: schemas.PropertyCreateRequest,
    db: DatabaseHandle = Depends(get_db),
    storage: StorageBackend = Depends(get_storage),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.create(db, storage, payload, user_id=int(current_user["id"]))


@router.get("/properties/search", name="property.search")
async def search_properties(
    q: str | None = Query(default=None, max_length=255),
    status: ListingStatus | None = None,
    property_type: PropertyType | None = None,
    min_price: Decimal | None = Query(default=None, ge=0),
    max_price: Decimal | None = Query(default=None, ge=0),
    bedrooms: int | None = Query(default=None, ge=0, le=schemas.MAX_ROOMS),
    limit: int = Query(repository.DEFAULT_SEARCH_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0, le=repository.MAX_SEARCH_OFFSET),
    db: DatabaseHandle = Depends(get_db),
) -> schemas.SearchResponse:
    filters = repository.SearchFilters(
        query=q,
        status=status,
        property_type=property_type,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
    )
    return await service.search(db, filters, limit=limit, offset=offset)


@router.get("/properties/featured", name="property.featured")
async def featured_properties(
    limit: int = Query(repository.DEFAULT_FEATURED_LIMIT, ge=1, le=50),
    db: DatabaseHandle = Depends(get_db),
) -> list[schemas.PropertyResponse]:
    return await service.featured(db, limit=limit)


@router.get("/properties/map", name="property.forMap")
async def properties_for_map(db: DatabaseHandle = Depends(get_db)) -> list[schemas.MapPropertyResponse]:
    return await service.for_map(db)


@router.get("/properties/mine", name="property.getMyListings")
async def my_listings(
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> list[schemas.PropertyResponse]:
    return await service.my_listings(db, user_id=int(current_user["id"]))


@router.get("/properties/{property_id}", name="property.get")
async def get_property(property_id: int, db: DatabaseHandle = Depends(get_db)) -> schemas.PropertyDetailResponse:
    return await service.get(db, property_id)


@router.patch("/properties/{property_id}", name="property.update")
async def update_property(
    property_id: int,
    payload: schemas.PropertyUpdateRequest,
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.update(db, property_id, payload, user_id=int(current_user["id"]))


@router.post("/properties/{property_id}/deactivate", name="property.deactivate")
async def deactivate_property(
    property_id: int,
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.set_active(db, property_id, user_id=int(current_user["id"]), is_active=False)


@router.post("/properties/{property_id}/activate", name="property.activate")
async def activate_property(
    property_id: int,
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.set_active(db, property_id, user_id=int(current_user["id"]), is_active=True)
