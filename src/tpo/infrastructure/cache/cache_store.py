from __future__ import annotations

import redis

from tpo.application.ports.cache import CacheStore
from tpo.infrastructure.cache.redis_client import get_redis_client


class RedisCacheStore(CacheStore):
    """String key/value cache with per-key expiry, used for branch rate sets."""

    def __init__(self, timeout_seconds: float = 1.0) -> None:
        self._timeout_seconds = timeout_seconds

    def _client(self) -> redis.Redis:
        return get_redis_client(timeout_seconds=self._timeout_seconds)

    def get(self, key: str) -> str | None:
        value = self._client().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._client().set(name=key, value=value, ex=ttl_seconds)

    def delete(self, key: str) -> None:
        self._client().delete(key)
