from __future__ import annotations

import logging
from dataclasses import replace

import redis
from pydantic import ValidationError

from tpo.application.ports.sessions import (
    CompositionSession,
    CompositionStore,
    OptimisticConcurrencyError,
)
from tpo.domain.common.ids import CompositionId
from tpo.infrastructure.cache.redis_client import get_redis_client
from tpo.infrastructure.sessions.records import (
    SESSION_SCHEMA_VERSION,
    SessionRecord,
    from_session_record,
    to_session_record,
)

logger = logging.getLogger(__name__)


def composition_key(composition_id: CompositionId) -> str:
    return f"composition:{composition_id}"


def _stored_revision(payload: str | None) -> int:
    """Revision of the stored document; a missing or unreadable one counts as 0."""
    if payload is None:
        return 0
    try:
        record = SessionRecord.model_validate_json(payload)
    except ValidationError:
        return 0
    if record.schemaVersion != SESSION_SCHEMA_VERSION:
        return 0
    return record.revision


class RedisCompositionStore(CompositionStore):
    """Keeps each editing session as one JSON document; every save renews the TTL."""

    def __init__(self, ttl_seconds: int, timeout_seconds: float = 1.0) -> None:
        self._ttl_seconds = ttl_seconds
        self._timeout_seconds = timeout_seconds

    def _client(self) -> redis.Redis:
        return get_redis_client(timeout_seconds=self._timeout_seconds)

    def get(self, composition_id: CompositionId) -> CompositionSession | None:
        payload = self._client().get(composition_key(composition_id))
        if payload is None:
            return None
        try:
            record = SessionRecord.model_validate_json(payload)
        except ValidationError:
            logger.warning("composition_payload_invalid", extra={"composition_id": composition_id})
            return None
        if record.schemaVersion != SESSION_SCHEMA_VERSION:
            return None
        return from_session_record(record)

    def save(self, session: CompositionSession) -> CompositionSession:
        key = composition_key(session.composition_id)
        stored = replace(session, revision=session.revision + 1)
        value = to_session_record(stored).model_dump_json()

        def _compare_and_set(pipe: redis.client.Pipeline) -> None:
            current = _stored_revision(pipe.get(key))
            if current != session.revision:
                raise OptimisticConcurrencyError(
                    f"composition {session.composition_id} revision conflict: "
                    f"expected {session.revision}, found {current}"
                )
            pipe.multi()
            pipe.set(name=key, value=value, ex=self._ttl_seconds)

        # WATCH/MULTI; redis-py re-runs the callable if the key changes before EXEC
        self._client().transaction(_compare_and_set, key)
        return stored

    def delete(self, composition_id: CompositionId) -> None:
        self._client().delete(composition_key(composition_id))
