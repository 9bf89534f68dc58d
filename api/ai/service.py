"""
Listing description drafts from the local LLM.

Nothing is persisted: the draft goes back to the client, which submits it
with the listing form if the user keeps it.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from core import config, ollama

from . import prompts, schemas

logger = logging.getLogger(__name__)


async def generate_description(payload: schemas.DescriptionRequest) -> schemas.DescriptionResponse:
    user_prompt = prompts.description_prompt(
        title=payload.title.strip(),
        property_type=payload.property_type,
        status=payload.status,
        location=payload.location.strip(),
        region=config.market_region(),
        bedrooms=payload.bedrooms,
        bathrooms=payload.bathrooms,
        area=payload.area,
        amenities=payload.amenities,
        additional_info=payload.additional_info,
    )
    model = config.description_model()

    try:
        text = await ollama.chat_text(
            base_url=config.ollama_base_url(),
            model=model,
            system_prompt=prompts.system_prompt(),
            user_prompt=user_prompt,
            timeout_s=config.description_timeout_s(),
            temperature=config.description_temperature(),
        )
    except ollama.OllamaError as exc:
        logger.error("description_generation_failed model=%s error=%s", model, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate description.",
        ) from exc

    return schemas.DescriptionResponse(description=text.strip())
