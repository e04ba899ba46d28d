from __future__ import annotations

import logging
from typing import Callable

from tpo.application.dto.requests import ChangeSelectionRequest
from tpo.application.dto.responses import CompositionResponse
from tpo.application.mappers.composition_mapper import to_composition_response
from tpo.application.metrics.composition import record_save_conflict, record_stale_response
from tpo.application.ports.sessions import CompositionSession, CompositionStore, OptimisticConcurrencyError
from tpo.application.use_cases.get_composition import CompositionConflictError, load_session
from tpo.application.use_cases.load_catalog import LoadCatalog
from tpo.application.use_cases.load_rate_set import LoadRateSet
from tpo.domain.common.ids import BranchId, CompositionId, OwnerId

logger = logging.getLogger(__name__)

SAVE_ATTEMPTS = 3


class ChangeSelection:
    """Switches branch/owner and refreshes rates and catalog for the new selection.

    The bumped selection is stored before any collaborator call. After the fetch the
    session is reloaded; if another selection landed meanwhile, the fetched data is
    dropped and the newer session is returned unchanged. Saves that lose a race with
    another request are re-applied on the reloaded session.
    """

    def __init__(
        self,
        store: CompositionStore,
        rate_loader: LoadRateSet,
        catalog_loader: LoadCatalog,
    ) -> None:
        self._store = store
        self._rate_loader = rate_loader
        self._catalog_loader = catalog_loader

    def execute(self, composition_id: CompositionId, request_dto: ChangeSelectionRequest) -> CompositionResponse:
        branch_id = BranchId(request_dto.branch_id) if request_dto.branch_id else None
        owner_id = OwnerId(request_dto.owner_id) if request_dto.owner_id else None

        selected = self._save_with_retry(
            composition_id,
            lambda session: session.with_composition(session.composition.with_selection(branch_id, owner_id)),
        )
        version = selected.composition.selection_version

        rate_set = self._rate_loader.execute(branch_id)
        products, notices = self._catalog_loader.execute(branch_id, owner_id)

        def _refresh(session: CompositionSession) -> CompositionSession | None:
            if not session.composition.is_current(version):
                return None
            refreshed = session.with_composition(session.composition.apply_rate_set(rate_set, version))
            return refreshed.apply_catalog(products, notices, version)

        refreshed = self._save_with_retry(composition_id, _refresh)
        if not refreshed.composition.is_current(version):
            record_stale_response("selection")
            logger.info(
                "stale_rate_set_discarded",
                extra={
                    "composition_id": composition_id,
                    "selection_version": version,
                    "current_version": refreshed.composition.selection_version,
                },
            )
        return to_composition_response(refreshed)

    def _save_with_retry(
        self,
        composition_id: CompositionId,
        change: Callable[[CompositionSession], CompositionSession | None],
    ) -> CompositionSession:
        """Load, apply ``change`` and save; a ``None`` change returns the loaded session as is."""
        for attempt in range(1, SAVE_ATTEMPTS + 1):
            session = load_session(self._store, composition_id)
            changed = change(session)
            if changed is None:
                return session
            try:
                return self._store.save(changed)
            except OptimisticConcurrencyError:
                record_save_conflict("retried")
                logger.info(
                    "composition_save_retried",
                    extra={"composition_id": composition_id, "attempt": attempt},
                )
        raise CompositionConflictError(
            f"composition {composition_id} kept changing; selection was not saved after {SAVE_ATTEMPTS} attempts"
        )
