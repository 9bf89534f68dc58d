"""
AI assistant endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, service

router = APIRouter()


@router.post("/ai/description", name="ai.generateDescription")
async def generate_description(
    payload: schemas.DescriptionRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.DescriptionResponse:
    return await service.generate_description(payload)
