"""
Admin endpoints. Everything except the role probe requires a super admin.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.db import DatabaseHandle
from core.deps import get_db

from . import dependencies, schemas, service

router = APIRouter()


@router.get("/admin/is-super-admin", name="admin.isSuperAdmin")
async def is_super_admin(
    db: DatabaseHandle = Depends(get_db),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await service.is_super_admin(db, user_id=int(current_user["id"]))


@router.get("/admin/users", name="admin.listUsers")
async def list_users(
    db: DatabaseHandle = Depends(get_db),
    admin: dict = Depends(dependencies.require_super_admin),
) -> list[schemas.AdminUserResponse]:
    return await service.list_users(db)


@router.post("/admin/users", name="admin.createUser")
async def create_user(
    payload: schemas.AdminUserCreateRequest,
    db: DatabaseHandle = Depends(get_db),
    admin: dict = Depends(dependencies.require_super_admin),
) -> dict:
    return await service.create_user(db, payload, actor_id=int(admin["id"]))


@router.patch("/admin/users/{user_id}", name="admin.updateUser")
async def update_user(
    user_id: int,
    payload: schemas.AdminUserUpdateRequest,
    db: DatabaseHandle = Depends(get_db),
    admin: dict = Depends(dependencies.require_super_admin),
) -> dict:
    return await service.update_user(db, user_id, payload, actor_id=int(admin["id"]))


@router.post("/admin/users/{user_id}/role", name="admin.updateRole")
async def update_role(
    user_id: int,
    payload: schemas.RoleUpdateRequest,
    db: DatabaseHandle = Depends(get_db),
    admin: dict = Depends(dependencies.require_super_admin),
) -> dict:
    return await service.update_role(db, user_id, payload.role, actor_id=int(admin["id"]))


@router.delete("/admin/users/{user_id}", name="admin.deleteUser")
async def delete_user(
    user_id: int,
    db: DatabaseHandle = Depends(get_db),
    admin: dict = Depends(dependencies.require_super_admin),
) -> dict:
    return await service.delete_user(db, user_id, actor_id=int(admin["id"]))
