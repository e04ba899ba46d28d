from __future__ import annotations

from fastapi import APIRouter, Response, status
from opentelemetry import trace

from tpo.api.middleware.request_id import get_request_id
from tpo.application.dto.requests import (
    ActiveCurrencyRequest,
    AddRowRequest,
    ChangeSelectionRequest,
    PriceWriteRequest,
    StartCompositionRequest,
    UpdateRowRequest,
    UpdateSubLineRequest,
)
from tpo.application.dto.responses import CompositionResponse, SubmitOrderResponse
from tpo.application.use_cases.change_selection import ChangeSelection
from tpo.application.use_cases.context import TraceContext
from tpo.application.use_cases.edit_composition import (
    AddRow,
    AddSubLine,
    RemoveRow,
    RemoveSubLine,
    SetActiveCurrency,
    ToggleSubLineMeal,
    UpdateRow,
    UpdateSubLine,
    WriteRowPrice,
    WriteSubLinePrice,
)
from tpo.application.use_cases.get_composition import DiscardComposition, GetComposition
from tpo.application.use_cases.load_catalog import LoadCatalog
from tpo.application.use_cases.load_rate_set import LoadRateSet
from tpo.application.use_cases.start_composition import StartComposition
from tpo.application.use_cases.submit_order import SubmitOrder
from tpo.domain.common.ids import CompositionId, RowId, SubLineId
from tpo.infrastructure import settings
from tpo.infrastructure.cache.cache_store import RedisCacheStore
from tpo.infrastructure.collaborators.adapters import (
    HttpOrderSource,
    HttpOrderSubmitter,
    HttpProductSource,
    HttpRateSetSource,
)
from tpo.infrastructure.collaborators.http_client import get_collaborator_client
from tpo.infrastructure.sessions.redis_session_store import RedisCompositionStore

router = APIRouter(prefix="/v1/compositions")


def _current_trace_id() -> str | None:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x")


def _store() -> RedisCompositionStore:
    return RedisCompositionStore(ttl_seconds=settings.composition_ttl_seconds())


def _rate_loader() -> LoadRateSet:
    return LoadRateSet(
        source=HttpRateSetSource(get_collaborator_client()),
        cache=RedisCacheStore(),
        ttl_seconds=settings.rate_set_cache_ttl_seconds(),
    )


def _catalog_loader() -> LoadCatalog:
    return LoadCatalog(source=HttpProductSource(get_collaborator_client()))


def _start_composition_use_case() -> StartComposition:
    return StartComposition(
        store=_store(),
        rate_loader=_rate_loader(),
        catalog_loader=_catalog_loader(),
        order_source=HttpOrderSource(get_collaborator_client()),
    )


def _get_composition_use_case() -> GetComposition:
    return GetComposition(store=_store())


def _discard_composition_use_case() -> DiscardComposition:
    return DiscardComposition(store=_store())


def _change_selection_use_case() -> ChangeSelection:
    return ChangeSelection(
        store=_store(),
        rate_loader=_rate_loader(),
        catalog_loader=_catalog_loader(),
    )


def _submit_order_use_case() -> SubmitOrder:
    return SubmitOrder(
        store=_store(),
        submitter=HttpOrderSubmitter(get_collaborator_client()),
    )


@router.post("", response_model=CompositionResponse, status_code=status.HTTP_201_CREATED)
def start_composition(request_dto: StartCompositionRequest) -> CompositionResponse:
    return _start_composition_use_case().execute(request_dto)


@router.get("/{composition_id}", response_model=CompositionResponse)
def get_composition(composition_id: str) -> CompositionResponse:
    return _get_composition_use_case().execute(CompositionId(composition_id))


@router.delete("/{composition_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_composition(composition_id: str) -> Response:
    _discard_composition_use_case().execute(CompositionId(composition_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{composition_id}/selection", response_model=CompositionResponse)
def change_selection(composition_id: str, request_dto: ChangeSelectionRequest) -> CompositionResponse:
    return _change_selection_use_case().execute(CompositionId(composition_id), request_dto)


@router.put("/{composition_id}/active-currency", response_model=CompositionResponse)
def set_active_currency(composition_id: str, request_dto: ActiveCurrencyRequest) -> CompositionResponse:
    return SetActiveCurrency(_store()).execute(CompositionId(composition_id), request_dto)


@router.post("/{composition_id}/rows", response_model=CompositionResponse, status_code=status.HTTP_201_CREATED)
def add_row(composition_id: str, request_dto: AddRowRequest) -> CompositionResponse:
    return AddRow(_store()).execute(CompositionId(composition_id), request_dto)


@router.patch("/{composition_id}/rows/{row_id}", response_model=CompositionResponse)
def update_row(composition_id: str, row_id: str, request_dto: UpdateRowRequest) -> CompositionResponse:
    return UpdateRow(_store()).execute(CompositionId(composition_id), RowId(row_id), request_dto)


@router.delete("/{composition_id}/rows/{row_id}", response_model=CompositionResponse)
def remove_row(composition_id: str, row_id: str) -> CompositionResponse:
    return RemoveRow(_store()).execute(CompositionId(composition_id), RowId(row_id))


@router.put("/{composition_id}/rows/{row_id}/price", response_model=CompositionResponse)
def write_row_price(composition_id: str, row_id: str, request_dto: PriceWriteRequest) -> CompositionResponse:
    return WriteRowPrice(_store()).execute(CompositionId(composition_id), RowId(row_id), request_dto)


@router.post(
    "/{composition_id}/rows/{row_id}/sub-lines",
    response_model=CompositionResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_sub_line(composition_id: str, row_id: str) -> CompositionResponse:
    return AddSubLine(_store()).execute(CompositionId(composition_id), RowId(row_id))


@router.patch("/{composition_id}/rows/{row_id}/sub-lines/{line_id}", response_model=CompositionResponse)
def update_sub_line(
    composition_id: str,
    row_id: str,
    line_id: str,
    request_dto: UpdateSubLineRequest,
) -> CompositionResponse:
    return UpdateSubLine(_store()).execute(
        CompositionId(composition_id),
        RowId(row_id),
        SubLineId(line_id),
        request_dto,
    )


@router.post("/{composition_id}/rows/{row_id}/sub-lines/{line_id}/meal-toggle", response_model=CompositionResponse)
def toggle_sub_line_meal(composition_id: str, row_id: str, line_id: str) -> CompositionResponse:
    return ToggleSubLineMeal(_store()).execute(CompositionId(composition_id), RowId(row_id), SubLineId(line_id))


@router.delete("/{composition_id}/rows/{row_id}/sub-lines/{line_id}", response_model=CompositionResponse)
def remove_sub_line(composition_id: str, row_id: str, line_id: str) -> CompositionResponse:
    return RemoveSubLine(_store()).execute(CompositionId(composition_id), RowId(row_id), SubLineId(line_id))


@router.put("/{composition_id}/rows/{row_id}/sub-lines/{line_id}/price", response_model=CompositionResponse)
def write_sub_line_price(
    composition_id: str,
    row_id: str,
    line_id: str,
    request_dto: PriceWriteRequest,
) -> CompositionResponse:
    return WriteSubLinePrice(_store()).execute(
        CompositionId(composition_id),
        RowId(row_id),
        SubLineId(line_id),
        request_dto,
    )


@router.post("/{composition_id}/submit", response_model=SubmitOrderResponse)
def submit_order(composition_id: str) -> SubmitOrderResponse:
    return _submit_order_use_case().execute(
        CompositionId(composition_id),
        trace_ctx=TraceContext(trace_id=_current_trace_id(), request_id=get_request_id()),
    )
