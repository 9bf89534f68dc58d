"""
Auth API endpoints: session introspection, logout, external login callback,
and the admin console's password login.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse

from core import config
from core.db import DatabaseHandle
from core.deps import get_db

from . import dependencies, schemas, security, service

router = APIRouter()


def _is_secure(request: Request) -> bool:
    forwarded = request.headers.get("x-forwarded-proto", "")
    proto = forwarded.split(",")[0].strip().lower() or request.url.scheme
    return proto == "https"


def _cookie_options(request: Request) -> dict:
    secure = _is_secure(request)
    return {
        "httponly": True,
        "secure": secure,
        # Cross-site cookies need SameSite=None, which browsers only accept with Secure.
        "samesite": "none" if secure else "lax",
        "path": "/",
    }


def set_session_cookie(response: Response, request: Request, token: str) -> None:
    response.set_cookie(
        config.session_cookie_name(),
        token,
        max_age=security.session_max_age_s(),
        **_cookie_options(request),
    )


@router.get("/auth/me", name="auth.me")
async def me(
    current_user: dict | None = Depends(dependencies.get_optional_user),
) -> schemas.UserResponse | None:
    if current_user is None:
        return None
    return service.to_user_response(current_user)


@router.post("/auth/logout", name="auth.logout")
async def logout(request: Request, response: Response) -> dict:
    response.delete_cookie(config.session_cookie_name(), **_cookie_options(request))
    return {"success": True}


@router.get("/auth/callback", name="auth.callback")
async def oauth_callback(
    request: Request,
    code: str = Query(..., min_length=1),
    db: DatabaseHandle = Depends(get_db),
) -> RedirectResponse:
    token = await service.complete_external_login(db, code)
    response = RedirectResponse(url="/", status_code=302)
    set_session_cookie(response, request, token)
    return response


@router.post("/auth/admin-login", name="authAdminLogin")
async def admin_login(
    payload: schemas.AdminLoginRequest,
    request: Request,
    response: Response,
    db: DatabaseHandle = Depends(get_db),
) -> schemas.AdminLoginResponse:
    user, token = await service.admin_login(db, payload)
    set_session_cookie(response, request, token)
    return schemas.AdminLoginResponse(user=user)
