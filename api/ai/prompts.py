"""
Prompt builders for listing description drafts.
"""

from __future__ import annotations

from decimal import Decimal


def system_prompt() -> str:
    return (
        "You are a professional real estate copywriter.\n"
        "Never use any emoji.\n"
        "Do not invent features that are not listed in the property details."
    )


def _detail_lines(
    *,
    title: str,
    property_type: str,
    status: str,
    location: str,
    region: str,
    bedrooms: int | None,
    bathrooms: int | None,
    area: Decimal | None,
    amenities: str | None,
    additional_info: str | None,
) -> list[str]:
    lines = [
        f"- Title: {title}",
        f"- Type: {property_type}",
        f"- Listing Type: For {status}",
        f"- Location: {location}, {region}",
    ]
    # Zero counts are left out, same as missing ones.
    if bedrooms:
        lines.append(f"- Bedrooms: {bedrooms}")
    if bathrooms:
        lines.append(f"- Bathrooms: {bathrooms}")
    if area:
        lines.append(f"- Area: {area} sqm")
    if amenities and amenities.strip():
        lines.append(f"- Amenities: {amenities.strip()}")
    if additional_info and additional_info.strip():
        lines.append(f"- Additional Info: {additional_info.strip()}")
    return lines


def description_prompt(
    *,
    title: str,
    property_type: str,
    status: str,
    location: str,
    region: str,
    bedrooms: int | None = None,
    bathrooms: int | None = None,
    area: Decimal | None = None,
    amenities: str | None = None,
    additional_info: str | None = None,
) -> str:
    details = "\n".join(
        _detail_lines(
            title=title,
            property_type=property_type,
            status=status,
            location=location,
            region=region,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            area=area,
            amenities=amenities,
            additional_info=additional_info,
        )
    )
    audience = "tenants" if status == "rent" else "buyers"
    return (
        f"You are a professional real estate copywriter specializing in the {region} market. "
        f"Write a compelling, engaging property description for a listing in {region}.\n\n"
        "Property Details:\n"
        f"{details}\n\n"
        "Write a 150-200 word description that:\n"
        "1. Highlights the property's best features\n"
        f"2. Mentions the location benefits in {region}\n"
        f"3. Appeals to potential {audience}\n"
        "4. Uses professional but warm language\n"
        "5. Includes a call to action\n\n"
        "Return ONLY the description text, no additional formatting or labels."
    )
