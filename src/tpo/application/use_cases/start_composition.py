from __future__ import annotations

import logging

from tpo.application.dto.requests import StartCompositionRequest
from tpo.application.dto.responses import CompositionResponse
from tpo.application.mappers.composition_mapper import to_composition_response
from tpo.application.metrics.composition import record_collaborator_failure, record_composition_started
from tpo.application.ports.collaborators import CollaboratorUnavailableError, OrderSource
from tpo.application.ports.sessions import CompositionSession, CompositionStore
from tpo.application.use_cases.load_catalog import LoadCatalog
from tpo.application.use_cases.load_rate_set import LoadRateSet
from tpo.domain.common.ids import BranchId, OrderId, OwnerId, new_composition_id
from tpo.domain.common.roles import Role
from tpo.domain.order.composition import start_composition
from tpo.domain.order.entities import OrderLineRow
from tpo.domain.order.hydrate import rows_from_order_items

logger = logging.getLogger(__name__)


class OrderNotFoundError(Exception):
    pass


class StartComposition:
    """Opens an editing session, either blank or hydrated from an existing order."""

    def __init__(
        self,
        store: CompositionStore,
        rate_loader: LoadRateSet,
        catalog_loader: LoadCatalog,
        order_source: OrderSource,
    ) -> None:
        self._store = store
        self._rate_loader = rate_loader
        self._catalog_loader = catalog_loader
        self._order_source = order_source

    def execute(self, request_dto: StartCompositionRequest) -> CompositionResponse:
        role = Role.parse(request_dto.role)
        branch_id = BranchId(request_dto.branch_id) if request_dto.branch_id else None
        owner_id = OwnerId(request_dto.owner_id) if request_dto.owner_id else None
        order_id = OrderId(request_dto.order_id) if request_dto.order_id else None

        rate_set = self._rate_loader.execute(branch_id)
        products, notices = self._catalog_loader.execute(branch_id, owner_id)

        rows: tuple[OrderLineRow, ...] = ()
        if order_id is not None:
            try:
                items = self._order_source.get_order_items(order_id)
            except CollaboratorUnavailableError as exc:
                record_collaborator_failure(exc.operation)
                raise
            if items is None:
                raise OrderNotFoundError(f"order not found: {order_id}")
            rows = rows_from_order_items(items, products, rate_set)

        composition = start_composition(
            composition_id=new_composition_id(),
            rate_set=rate_set,
            branch_id=branch_id,
            owner_id=owner_id,
            order_id=order_id,
            rows=rows,
        )
        session = CompositionSession(
            composition=composition,
            role=role,
            products=products,
            notices=notices,
        )
        session = self._store.save(session)

        mode = "edit" if composition.is_edit else "new"
        record_composition_started(mode)
        logger.info(
            "composition_started",
            extra={
                "composition_id": composition.composition_id,
                "mode": mode,
                "role": role.value if role else None,
                "branch_id": branch_id,
            },
        )
        return to_composition_response(session)
