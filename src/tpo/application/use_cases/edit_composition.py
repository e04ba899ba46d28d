from __future__ import annotations

from tpo.application.dto.requests import (
    ActiveCurrencyRequest,
    AddRowRequest,
    PriceWriteRequest,
    UpdateRowRequest,
    UpdateSubLineRequest,
)
from tpo.application.dto.responses import CompositionResponse
from tpo.application.mappers.composition_mapper import to_composition_response
from tpo.application.ports.sessions import CompositionSession, CompositionStore
from tpo.application.use_cases.get_composition import load_session, save_session
from tpo.domain.catalog.entities import Product, ProductType, find_product
from tpo.domain.common.ids import CompositionId, RowId, SubLineId
from tpo.domain.common.roles import can_edit_prices
from tpo.domain.order.composition import OrderComposition, SubLineNotFoundError


class ProductUnavailableError(Exception):
    def __init__(self, message: str, product_id: str, row_type: str) -> None:
        super().__init__(message)
        self.details = {"productId": product_id, "type": row_type}


class PriceEditingForbiddenError(Exception):
    pass


def _catalog_product(session: CompositionSession, product_id: str, row_type: ProductType) -> Product:
    product = find_product(session.products, product_id, row_type)
    if product is None:
        raise ProductUnavailableError(
            f"product {product_id} is not offered for {row_type.value} rows",
            product_id=product_id,
            row_type=row_type.value,
        )
    return product


def _row_product(session: CompositionSession, row_id: RowId) -> Product | None:
    row = session.composition.row(row_id)
    return find_product(session.products, row.product_id, row.row_type)


def _ensure_price_editing(session: CompositionSession) -> None:
    if not can_edit_prices(session.role):
        role = session.role.value if session.role else "unknown"
        raise PriceEditingForbiddenError(f"role {role} cannot edit prices")


class _CompositionCommand:
    def __init__(self, store: CompositionStore) -> None:
        self._store = store

    def _commit(self, session: CompositionSession, composition: OrderComposition) -> CompositionResponse:
        updated = session.with_composition(composition)
        if updated is not session:
            updated = save_session(self._store, updated)
        return to_composition_response(updated)


class AddRow(_CompositionCommand):
    def execute(self, composition_id: CompositionId, request_dto: AddRowRequest) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        return self._commit(session, session.composition.add_row(request_dto.type))


class UpdateRow(_CompositionCommand):
    """Applies a partial row update: type switch first, then product, then quantity."""

    def execute(
        self,
        composition_id: CompositionId,
        row_id: RowId,
        request_dto: UpdateRowRequest,
    ) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        composition = session.composition
        composition.row(row_id)
        provided = request_dto.model_fields_set

        if "type" in provided and request_dto.type is not None:
            composition = composition.change_row_type(row_id, request_dto.type)

        if "product_id" in provided:
            if request_dto.product_id:
                row_type = composition.row(row_id).row_type
                product = _catalog_product(session, request_dto.product_id, row_type)
                composition = composition.select_product(row_id, product)
            else:
                composition = composition.select_product(row_id, None)

        if "quantity" in provided:
            composition = composition.set_row_quantity(row_id, request_dto.quantity)

        return self._commit(session, composition)


class RemoveRow(_CompositionCommand):
    def execute(self, composition_id: CompositionId, row_id: RowId) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        return self._commit(session, session.composition.remove_row(row_id))


class WriteRowPrice(_CompositionCommand):
    def execute(
        self,
        composition_id: CompositionId,
        row_id: RowId,
        request_dto: PriceWriteRequest,
    ) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        _ensure_price_editing(session)
        composition = session.composition.write_row_price(row_id, request_dto.currency, request_dto.value)
        return self._commit(session, composition)


class AddSubLine(_CompositionCommand):
    def execute(self, composition_id: CompositionId, row_id: RowId) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        product = _row_product(session, row_id)
        return self._commit(session, session.composition.add_sub_line(row_id, product))


class UpdateSubLine(_CompositionCommand):
    def execute(
        self,
        composition_id: CompositionId,
        row_id: RowId,
        line_id: SubLineId,
        request_dto: UpdateSubLineRequest,
    ) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        if session.composition.hotel_row(row_id).sub_line(line_id) is None:
            raise SubLineNotFoundError(f"sub-line not found: {line_id}")
        product = _row_product(session, row_id)
        composition = session.composition
        provided = request_dto.model_fields_set

        if "room_type" in provided and request_dto.room_type is not None:
            composition = composition.set_sub_line_room_type(row_id, line_id, request_dto.room_type, product)
        if "quantity" in provided:
            composition = composition.set_sub_line_quantity(row_id, line_id, request_dto.quantity)
        if "with_meal" in provided and request_dto.with_meal is not None:
            composition = composition.set_sub_line_meal(row_id, line_id, request_dto.with_meal, product)
        return self._commit(session, composition)


class ToggleSubLineMeal(_CompositionCommand):
    def execute(self, composition_id: CompositionId, row_id: RowId, line_id: SubLineId) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        product = _row_product(session, row_id)
        return self._commit(session, session.composition.toggle_sub_line_meal(row_id, line_id, product))


class RemoveSubLine(_CompositionCommand):
    def execute(self, composition_id: CompositionId, row_id: RowId, line_id: SubLineId) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        return self._commit(session, session.composition.remove_sub_line(row_id, line_id))


class WriteSubLinePrice(_CompositionCommand):
    def execute(
        self,
        composition_id: CompositionId,
        row_id: RowId,
        line_id: SubLineId,
        request_dto: PriceWriteRequest,
    ) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        _ensure_price_editing(session)
        composition = session.composition.write_sub_line_price(
            row_id,
            line_id,
            request_dto.currency,
            request_dto.value,
        )
        return self._commit(session, composition)


class SetActiveCurrency(_CompositionCommand):
    def execute(self, composition_id: CompositionId, request_dto: ActiveCurrencyRequest) -> CompositionResponse:
        session = load_session(self._store, composition_id)
        return self._commit(session, session.composition.set_active_currency(request_dto.currency))
