from __future__ import annotations

import logging

from tpo.application.metrics.composition import record_collaborator_failure
from tpo.application.ports.collaborators import CollaboratorUnavailableError, ProductSource
from tpo.application.ports.sessions import Notice
from tpo.domain.catalog.entities import Product
from tpo.domain.common.ids import BranchId, OwnerId

logger = logging.getLogger(__name__)

CATALOG_UNAVAILABLE = "CATALOG_UNAVAILABLE"


class LoadCatalog:
    def __init__(self, source: ProductSource) -> None:
        self._source = source

    def execute(
        self,
        branch_id: BranchId | None,
        owner_id: OwnerId | None,
    ) -> tuple[tuple[Product, ...], tuple[Notice, ...]]:
        try:
            products = self._source.list_products(branch_id, owner_id)
        except CollaboratorUnavailableError as exc:
            record_collaborator_failure(exc.operation)
            logger.warning(
                "catalog_fetch_failed",
                extra={"branch_id": branch_id, "owner_id": owner_id, "error": str(exc)},
            )
            return (), (Notice(code=CATALOG_UNAVAILABLE, message="Product catalog could not be loaded."),)
        return tuple(products), ()
