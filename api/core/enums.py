"""
Value sets shared by schemas and SQL (mirrors the Postgres enum types).
"""

from __future__ import annotations

from typing import Literal

UserRole = Literal["user", "admin", "agent", "superadmin"]
PropertyType = Literal["house", "apartment", "land", "commercial"]
ListingStatus = Literal["rent", "sale"]

ADMIN_ROLES = ("admin", "superadmin")
