"""
Super-admin gate. The role is read from the database on every request.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, status

from auth import dependencies as auth_dependencies
from core.db import DatabaseHandle
from core.deps import get_db

from . import repository


async def require_super_admin(
    current_user: dict = Depends(auth_dependencies.get_current_user),
    db: DatabaseHandle = Depends(get_db),
) -> dict:
    if not await repository.is_super_admin(db, int(current_user["id"])):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required.",
        )
    return current_user
