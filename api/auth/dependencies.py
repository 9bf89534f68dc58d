"""
Auth dependencies for public and protected FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from core import config
from core.db import DatabaseHandle
from core.deps import get_db

from . import service


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(config.session_cookie_name())


async def get_optional_user(
    token: str | None = Depends(get_session_token),
    db: DatabaseHandle = Depends(get_db),
) -> dict | None:
    return await service.get_user_from_session_token(db, token)


async def get_current_user(user: dict | None = Depends(get_optional_user)) -> dict:
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please login.",
        )
    return user
