from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from fakes import (
    FakeCacheStore,
    FakeCompositionStore,
    FakeOrderSource,
    FakeProductSource,
    FakeRateSetSource,
    RacingCompositionStore,
    hotel_product,
    visa_product,
)
from tpo.application.dto.requests import (
    ActiveCurrencyRequest,
    AddRowRequest,
    PriceWriteRequest,
    StartCompositionRequest,
    UpdateRowRequest,
    UpdateSubLineRequest,
)
from tpo.application.dto.responses import CompositionResponse
from tpo.application.use_cases.edit_composition import (
    AddRow,
    AddSubLine,
    PriceEditingForbiddenError,
    ProductUnavailableError,
    RemoveRow,
    SetActiveCurrency,
    ToggleSubLineMeal,
    UpdateRow,
    UpdateSubLine,
    WriteRowPrice,
)
from tpo.application.use_cases.get_composition import (
    CompositionConflictError,
    CompositionNotFoundError,
    DiscardComposition,
)
from tpo.application.use_cases.load_catalog import LoadCatalog
from tpo.application.use_cases.load_rate_set import LoadRateSet
from tpo.application.use_cases.start_composition import StartComposition
from tpo.domain.common.ids import CompositionId, RowId, SubLineId
from tpo.domain.common.money import Currency, CurrencyRateSet
from tpo.domain.order.composition import PricedPerSubLineError, SubLineNotFoundError


def _start(store: FakeCompositionStore, role: str = "invoice_koordinator") -> CompositionResponse:
    use_case = StartComposition(
        store=store,
        rate_loader=LoadRateSet(source=FakeRateSetSource(CurrencyRateSet.of(4300, 16000)), cache=FakeCacheStore()),
        catalog_loader=LoadCatalog(source=FakeProductSource([hotel_product(), visa_product()])),
        order_source=FakeOrderSource(),
    )
    return use_case.execute(StartCompositionRequest(role=role, branchId="brn_1"))


def _ids(response: CompositionResponse) -> tuple[CompositionId, RowId]:
    return CompositionId(response.compositionId), RowId(response.rows[0].rowId)


def test_selecting_hotel_prices_sub_lines_from_room_breakdown() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))

    response = UpdateRow(store).execute(composition_id, row_id, UpdateRowRequest(productId="prd_hotel"))

    row = response.rows[0]
    assert row.productName == "Makkah Tower"
    assert row.currency == "SAR"
    assert row.subLines[0].unitPrice == Decimal("100")


def test_sub_line_update_reprices_and_totals_follow() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))
    selected = UpdateRow(store).execute(composition_id, row_id, UpdateRowRequest(productId="prd_hotel"))
    line_id = SubLineId(selected.rows[0].subLines[0].lineId)

    response = UpdateSubLine(store).execute(
        composition_id,
        row_id,
        line_id,
        UpdateSubLineRequest(quantity=2, withMeal=True),
    )

    line = response.rows[0].subLines[0]
    assert line.unitPrice == Decimal("120")
    assert line.subtotal == Decimal("240")
    assert line.headcount == 8
    assert response.totals.totalSar == Decimal("240")
    assert response.totals.totalIdr == Decimal("1032000")
    assert response.totals.totalHeadcount == 8


def test_toggle_meal_flips_and_reprices() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))
    selected = UpdateRow(store).execute(composition_id, row_id, UpdateRowRequest(productId="prd_hotel"))
    line_id = SubLineId(selected.rows[0].subLines[0].lineId)

    toggled = ToggleSubLineMeal(store).execute(composition_id, row_id, line_id)

    assert toggled.rows[0].subLines[0].withMeal is True
    assert toggled.rows[0].subLines[0].unitPrice == Decimal("120")


def test_product_of_another_type_is_unavailable() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))

    with pytest.raises(ProductUnavailableError) as exc_info:
        UpdateRow(store).execute(composition_id, row_id, UpdateRowRequest(productId="prd_visa"))

    assert exc_info.value.details == {"productId": "prd_visa", "type": "hotel"}


def test_type_switch_and_product_in_one_update() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))

    response = UpdateRow(store).execute(
        composition_id,
        row_id,
        UpdateRowRequest(type="visa", productId="prd_visa", quantity=3),
    )

    row = response.rows[0]
    assert row.type == "visa"
    assert row.subLines == []
    assert row.productId == "prd_visa"
    assert row.quantity == 3


def test_price_write_requires_price_editing_role() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store, role="owner"))

    with pytest.raises(PriceEditingForbiddenError):
        WriteRowPrice(store).execute(composition_id, row_id, PriceWriteRequest(currency="IDR", value=1000))


def test_price_write_in_active_currency_updates_row() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))
    UpdateRow(store).execute(composition_id, row_id, UpdateRowRequest(type="visa", productId="prd_visa"))

    response = WriteRowPrice(store).execute(
        composition_id,
        row_id,
        PriceWriteRequest(currency="IDR", value="2150000"),
    )

    assert response.rows[0].unitPrice == Decimal("2150000")


def test_price_write_in_inactive_currency_is_ignored() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))
    before = UpdateRow(store).execute(composition_id, row_id, UpdateRowRequest(type="visa", productId="prd_visa"))
    saves = store.saves

    response = WriteRowPrice(store).execute(composition_id, row_id, PriceWriteRequest(currency="SAR", value=500))

    assert response.rows[0].unitPrice == before.rows[0].unitPrice
    assert store.saves == saves


def test_active_currency_switch() -> None:
    store = FakeCompositionStore()
    composition_id, _ = _ids(_start(store))

    response = SetActiveCurrency(store).execute(composition_id, ActiveCurrencyRequest(currency="SAR"))

    assert response.activeCurrency == "SAR"


def test_removing_last_row_leaves_a_blank_row() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))

    response = RemoveRow(store).execute(composition_id, row_id)

    assert len(response.rows) == 1
    assert response.rows[0].rowId != row_id
    assert response.rows[0].type == "hotel"


def test_added_rows_and_sub_lines_accumulate() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))

    AddRow(store).execute(composition_id, AddRowRequest())
    response = AddSubLine(store).execute(composition_id, row_id)

    assert len(response.rows) == 2
    assert len(response.rows[0].subLines) == 2


def test_unknown_sub_line_raises() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))

    with pytest.raises(SubLineNotFoundError):
        UpdateSubLine(store).execute(composition_id, row_id, SubLineId("sl_missing"), UpdateSubLineRequest(quantity=1))


def test_unknown_composition_raises() -> None:
    with pytest.raises(CompositionNotFoundError):
        AddRow(FakeCompositionStore()).execute(CompositionId("cmp_missing"), AddRowRequest())


def test_discard_removes_session() -> None:
    store = FakeCompositionStore()
    composition_id, _ = _ids(_start(store))

    DiscardComposition(store).execute(composition_id)

    assert store.sessions == {}


def test_edit_that_loses_a_race_is_a_conflict() -> None:
    store = RacingCompositionStore()
    composition_id, _ = _ids(_start(store))
    store.interleave = lambda: SetActiveCurrency(store).execute(composition_id, ActiveCurrencyRequest(currency="SAR"))

    with pytest.raises(CompositionConflictError):
        AddRow(store).execute(composition_id, AddRowRequest())

    stored = store.sessions[composition_id]
    assert stored.composition.active_currency == Currency.SAR
    assert len(stored.composition.rows) == 1


def test_edit_of_a_discarded_session_is_not_found() -> None:
    store = RacingCompositionStore()
    composition_id, _ = _ids(_start(store))
    store.interleave = lambda: DiscardComposition(store).execute(composition_id)

    with pytest.raises(CompositionNotFoundError):
        AddRow(store).execute(composition_id, AddRowRequest())

    assert store.sessions == {}


def test_successive_edits_advance_the_revision() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))

    AddRow(store).execute(composition_id, AddRowRequest())
    AddSubLine(store).execute(composition_id, row_id)

    assert store.sessions[composition_id].revision == 3


def test_row_price_write_on_hotel_row_names_sub_lines() -> None:
    store = FakeCompositionStore()
    composition_id, row_id = _ids(_start(store))

    with pytest.raises(PricedPerSubLineError):
        WriteRowPrice(store).execute(composition_id, row_id, PriceWriteRequest(currency="IDR", value=1000))
