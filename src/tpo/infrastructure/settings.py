from __future__ import annotations

import os

DEFAULT_COLLABORATOR_TIMEOUT_SECONDS = 10.0
DEFAULT_COMPOSITION_TTL_SECONDS = 7200
DEFAULT_RATE_SET_CACHE_TTL_SECONDS = 300


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def collaborator_api_url() -> str:
    url = os.getenv("COLLABORATOR_API_URL")
    if not url:
        raise RuntimeError("COLLABORATOR_API_URL is not set")
    return url.rstrip("/")


def collaborator_api_token() -> str | None:
    return os.getenv("COLLABORATOR_API_TOKEN") or None


def collaborator_timeout_seconds() -> float:
    return _env_number("COLLABORATOR_TIMEOUT_SECONDS", DEFAULT_COLLABORATOR_TIMEOUT_SECONDS)


def composition_ttl_seconds() -> int:
    return int(_env_number("COMPOSITION_TTL_SECONDS", DEFAULT_COMPOSITION_TTL_SECONDS))


def rate_set_cache_ttl_seconds() -> int:
    return int(_env_number("RATE_SET_CACHE_TTL_SECONDS", DEFAULT_RATE_SET_CACHE_TTL_SECONDS))


def app_env() -> str:
    return (os.getenv("APP_ENV") or "dev").strip().lower()


def cors_allow_origins() -> list[str]:
    if app_env() in {"dev", "test"}:
        return ["*"]
    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]
