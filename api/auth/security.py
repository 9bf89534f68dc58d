"""
Auth security helpers: password hashing and session tokens.
"""

from __future__ import annotations

import time
from typing import Any

import bcrypt
import jwt

from core import config

BCRYPT_ROUNDS = 10


class AuthSecurityError(RuntimeError):
    pass


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def session_max_age_s() -> int:
    return config.session_expire_days() * 24 * 60 * 60


def build_session_token(*, user_id: int, open_id: str, name: str | None = None) -> str:
    issued_at = now_epoch_s()

    payload = {
        "sub": str(user_id),
        "open_id": open_id,
        "name": name or "",
        "type": "session",
        "iat": issued_at,
        "exp": issued_at + session_max_age_s(),
    }
    return jwt.encode(payload, config.jwt_secret(), algorithm=config.jwt_algorithm())


def decode_session_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Session token is empty.")

    try:
        payload = jwt.decode(raw, config.jwt_secret(), algorithms=[config.jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid session token.") from exc

    if str(payload.get("type") or "").strip().lower() != "session":
        raise AuthSecurityError("Token is not a session token.")

    return payload
