from __future__ import annotations

from tpo.application.dto.responses import CompositionResponse
from tpo.application.mappers.composition_mapper import to_composition_response
from tpo.application.metrics.composition import record_save_conflict
from tpo.application.ports.sessions import CompositionSession, CompositionStore, OptimisticConcurrencyError
from tpo.domain.common.ids import CompositionId


class CompositionNotFoundError(Exception):
    pass


class CompositionConflictError(Exception):
    pass


def load_session(store: CompositionStore, composition_id: CompositionId) -> CompositionSession:
    session = store.get(composition_id)
    if session is None:
        raise CompositionNotFoundError(f"composition not found: {composition_id}")
    return session


def save_session(store: CompositionStore, session: CompositionSession) -> CompositionSession:
    try:
        return store.save(session)
    except OptimisticConcurrencyError:
        record_save_conflict("rejected")
        if store.get(session.composition_id) is None:
            raise CompositionNotFoundError(f"composition not found: {session.composition_id}")
        raise CompositionConflictError(
            f"composition {session.composition_id} was changed by another request; reload and retry"
        )


class GetComposition:
    def __init__(self, store: CompositionStore) -> None:
        self._store = store

    def execute(self, composition_id: CompositionId) -> CompositionResponse:
        return to_composition_response(load_session(self._store, composition_id))


class DiscardComposition:
    def __init__(self, store: CompositionStore) -> None:
        self._store = store

    def execute(self, composition_id: CompositionId) -> None:
        load_session(self._store, composition_id)
        self._store.delete(composition_id)
