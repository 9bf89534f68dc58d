"""
Admin user-management orchestration: maps repository guard errors to HTTP.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from core.db import DatabaseHandle

from . import repository, schemas

logger = logging.getLogger(__name__)


def _immutable() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot modify immutable user.")


async def is_super_admin(db: DatabaseHandle, *, user_id: int) -> dict:
    return {"is_super_admin": await repository.is_super_admin(db, user_id)}


async def list_users(db: DatabaseHandle) -> list[dict]:
    return await repository.list_users(db)


async def create_user(db: DatabaseHandle, payload: schemas.AdminUserCreateRequest, *, actor_id: int) -> dict:
    try:
        user_id = await repository.create_user(
            db,
            name=payload.name.strip(),
            email=str(payload.email),
            role=payload.role,
            password=payload.password,
            phone=payload.phone,
        )
    except repository.DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists.") from exc

    logger.info("admin_user_created actor_id=%s user_id=%s role=%s", actor_id, user_id, payload.role)
    return {"success": True, "id": user_id}


async def update_user(
    db: DatabaseHandle,
    user_id: int,
    payload: schemas.AdminUserUpdateRequest,
    *,
    actor_id: int,
) -> dict:
    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    if data.get("role") is None:
        data.pop("role", None)
    if data.get("email") is not None:
        data["email"] = str(data["email"])

    try:
        await repository.update_user(db, user_id, data)
    except repository.UserNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.") from exc
    except repository.ImmutableUserError as exc:
        raise _immutable() from exc
    except repository.DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists.") from exc

    logger.info("admin_user_updated actor_id=%s user_id=%s fields=%s", actor_id, user_id, sorted(data))
    return {"success": True}


async def update_role(db: DatabaseHandle, user_id: int, role: str, *, actor_id: int) -> dict:
    try:
        await repository.update_user_role(db, user_id, role)
    except repository.ImmutableUserError as exc:
        raise _immutable() from exc

    logger.info("admin_role_updated actor_id=%s user_id=%s role=%s", actor_id, user_id, role)
    return {"success": True}


async def delete_user(db: DatabaseHandle, user_id: int, *, actor_id: int) -> dict:
    try:
        await repository.delete_user(db, user_id)
    except repository.ImmutableUserError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot delete immutable user.") from exc

    logger.info("admin_user_deleted actor_id=%s user_id=%s", actor_id, user_id)
    return {"success": True}
