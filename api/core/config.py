"""
Environment-backed settings.

Every setting is a small function so tests can flip env vars with
`monkeypatch.setenv` without reloading modules. Malformed numbers fall back
to the default instead of failing at import time.
"""

from __future__ import annotations

import os

DEFAULT_JWT_SECRET = "dev-change-this-secret"
DEFAULT_SUPER_ADMIN_EMAIL = "superadmin@guest.com"
DEFAULT_OLLAMA_BASE_URL = "http://ollama:11434"
DEFAULT_DESCRIPTION_MODEL = "qwen2.5:3b-instruct"
DEFAULT_MAX_IMAGE_BYTES = 10 * 1024 * 1024  # 10 MiB


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()


def cors_origins() -> list[str]:
    raw = env_str("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


# Session / auth

def jwt_secret() -> str:
    # In production, set JWT_SECRET in environment.
    return env_str("JWT_SECRET", DEFAULT_JWT_SECRET)


def jwt_algorithm() -> str:
    return env_str("JWT_ALG", "HS256")


def session_cookie_name() -> str:
    return env_str("SESSION_COOKIE_NAME", "app_session_id")


def session_expire_days() -> int:
    return env_int("SESSION_EXPIRE_DAYS", 365)


def owner_open_id() -> str:
    return env_str("OWNER_OPEN_ID")


def super_admin_email() -> str:
    return env_str("SUPER_ADMIN_EMAIL", DEFAULT_SUPER_ADMIN_EMAIL).lower()


def super_admin_password() -> str:
    return os.environ.get("SUPER_ADMIN_PASSWORD", "")


# LLM

def ollama_base_url() -> str:
    return env_str("OLLAMA_BASE_URL", DEFAULT_OLLAMA_BASE_URL)


def description_model() -> str:
    return env_str("DESCRIPTION_MODEL", DEFAULT_DESCRIPTION_MODEL)


def description_timeout_s() -> float:
    return env_float("DESCRIPTION_TIMEOUT_S", 120.0)


def description_temperature() -> float:
    return env_float("DESCRIPTION_TEMPERATURE", 0.7)


def market_region() -> str:
    return env_str("MARKET_REGION", "Honiara, Solomon Islands")


# Uploads

def max_image_bytes() -> int:
    value = env_int("MAX_IMAGE_BYTES", DEFAULT_MAX_IMAGE_BYTES)
    return value if value > 0 else DEFAULT_MAX_IMAGE_BYTES
