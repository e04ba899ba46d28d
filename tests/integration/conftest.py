from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from tpo.infrastructure.cache import redis_client


@pytest.fixture(scope="session", autouse=True)
def integration_environment() -> Iterator[None]:
    os.environ.setdefault("REDIS_URL", "redis://localhost:6379/0")
    os.environ.setdefault("OTEL_SERVICE_NAME", "tpo-pricing-test")
    os.environ.setdefault("OTEL_EXPORTER_OTLP_ENDPOINT", "")

    redis_client._connection_pool.cache_clear()
    if not redis_client.ping_redis():
        pytest.skip("redis is not reachable")

    redis = redis_client.get_redis_client()
    redis.flushdb()
    yield
    redis.flushdb()


@pytest.fixture(autouse=True)
def clear_redis() -> Iterator[None]:
    redis = redis_client.get_redis_client()
    redis.flushdb()
    yield
    redis.flushdb()
