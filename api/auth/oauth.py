"""
External login: OAuth2 authorization-code exchange.

1) POST OAUTH_TOKEN_URL (grant_type=authorization_code) -> {"access_token": ...}
2) GET  OAUTH_USERINFO_URL with the bearer token     -> {"sub", "name", "email", ...}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from core import config


class OAuthError(RuntimeError):
    pass


@dataclass(frozen=True)
class ExternalIdentity:
    open_id: str
    name: str | None
    email: str | None
    login_method: str | None


def _required(name: str) -> str:
    value = config.env_str(name)
    if not value:
        raise OAuthError(f"{name} is not set.")
    return value


def _identity_from_userinfo(data: dict[str, Any]) -> ExternalIdentity:
    open_id = str(data.get("sub") or data.get("open_id") or data.get("openId") or "").strip()
    if not open_id:
        raise OAuthError("Userinfo response has no subject.")

    def _optional(*keys: str) -> str | None:
        for key in keys:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None

    return ExternalIdentity(
        open_id=open_id,
        name=_optional("name", "preferred_username"),
        email=_optional("email"),
        login_method=_optional("login_method", "loginMethod", "platform") or "oauth",
    )


async def exchange_code(code: str, *, timeout_s: float = 15.0) -> ExternalIdentity:
    code = (code or "").strip()
    if not code:
        raise OAuthError("Authorization code is empty.")

    token_url = _required("OAUTH_TOKEN_URL")
    userinfo_url = _required("OAUTH_USERINFO_URL")

    try:
        async with httpx.AsyncClient(timeout=timeout_s) as client:
            token_resp = await client.post(
                token_url,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "client_id": _required("OAUTH_CLIENT_ID"),
                    "client_secret": config.env_str("OAUTH_CLIENT_SECRET"),
                    "redirect_uri": config.env_str("OAUTH_REDIRECT_URI"),
                },
            )
            if token_resp.status_code != 200:
                raise OAuthError(f"Token exchange failed: {token_resp.status_code} {token_resp.text[:300]}")

            access_token = str(token_resp.json().get("access_token") or "").strip()
            if not access_token:
                raise OAuthError("Token response has no access_token.")

            info_resp = await client.get(
                userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
    except httpx.HTTPError as exc:
        raise OAuthError(f"OAuth request failed: {exc}") from exc

    if info_resp.status_code != 200:
        raise OAuthError(f"Userinfo request failed: {info_resp.status_code} {info_resp.text[:300]}")

    return _identity_from_userinfo(info_resp.json())
