from __future__ import annotations

import os
from functools import lru_cache

import redis

# Sessions and cached rate sets are both JSON text.
_POOL_OPTIONS = {"decode_responses": True, "health_check_interval": 30}


def _redis_url() -> str:
    url = os.getenv("REDIS_URL")
    if not url:
        raise RuntimeError("REDIS_URL is not set")
    return url


@lru_cache(maxsize=8)
def _connection_pool(redis_url: str, timeout_seconds: float) -> redis.ConnectionPool:
    return redis.ConnectionPool.from_url(
        redis_url,
        socket_connect_timeout=timeout_seconds,
        socket_timeout=timeout_seconds,
        **_POOL_OPTIONS,
    )


def get_redis_client(timeout_seconds: float = 1.0) -> redis.Redis:
    return redis.Redis(connection_pool=_connection_pool(_redis_url(), timeout_seconds))


def ping_redis(timeout_seconds: float = 1.0) -> bool:
    try:
        return bool(get_redis_client(timeout_seconds).ping())
    except (RuntimeError, redis.RedisError):
        return False
