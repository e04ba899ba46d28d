from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tpo.domain.catalog.entities import PriceTiers, Product, ProductType, RoomPrice
from tpo.domain.common.ids import CompositionId, ProductId
from tpo.domain.common.money import Currency, CurrencyRateSet
from tpo.domain.order.composition import (
    NotAHotelRowError,
    OrderComposition,
    PricedPerSubLineError,
    ProductTypeMismatchError,
    RowNotFoundError,
    SubLineNotFoundError,
    start_composition,
)
from tpo.domain.order.entities import HotelRow, SimpleRow, row_headcount, row_subtotal
from tpo.domain.order.reconcile import reconcile
from tpo.domain.pricing.rooms import RoomType

RATES = CurrencyRateSet(sar_to_idr=Decimal("4200"), usd_to_idr=Decimal("15500"))


def _hotel_product() -> Product:
    return Product(
        product_id=ProductId("prd_hotel"),
        code="HTL-MAK",
        name="Makkah Tower",
        product_type=ProductType.HOTEL,
        native_currency=Currency.SAR,
        prices=PriceTiers(general=Decimal("90")),
        room_breakdown={
            RoomType.QUAD: RoomPrice(quantity=10, price=Decimal("100")),
            RoomType.DOUBLE: RoomPrice(quantity=4, price=Decimal("150")),
        },
        meal_price=Decimal("20"),
    )


def _visa_product() -> Product:
    return Product(
        product_id=ProductId("prd_visa"),
        code="VISA",
        name="Umrah visa",
        product_type=ProductType.VISA,
        native_currency=Currency.IDR,
        prices=PriceTiers(general=Decimal("2100000")),
    )


def _composition() -> OrderComposition:
    return start_composition(CompositionId("cmp_test"), RATES)


def _only_row(composition: OrderComposition):
    assert len(composition.rows) == 1
    return composition.rows[0]


def test_new_composition_has_one_hotel_row_with_default_sub_line() -> None:
    row = _only_row(_composition())

    assert isinstance(row, HotelRow)
    assert len(row.sub_lines) == 1
    assert row.sub_lines[0].room_type == RoomType.QUAD
    assert row.sub_lines[0].quantity == 1
    assert row.sub_lines[0].unit_price == Decimal("0")


def test_hotel_quad_with_meal_prices_and_counts_guests() -> None:
    composition = _composition()
    row_id = composition.rows[0].row_id
    composition = composition.select_product(row_id, _hotel_product())
    line_id = composition.hotel_row(row_id).sub_lines[0].line_id
    composition = composition.set_sub_line_quantity(row_id, line_id, 2)
    composition = composition.toggle_sub_line_meal(row_id, line_id, _hotel_product())

    row = composition.hotel_row(row_id)
    assert row.currency == Currency.SAR
    assert row.sub_lines[0].unit_price == Decimal("120")
    assert row_subtotal(row) == Decimal("240")
    assert row_headcount(row) == 8
    assert reconcile(composition.rows, composition.rate_set).total_idr == Decimal("1008000")


def test_negative_quantity_is_clamped_before_aggregation() -> None:
    composition = _composition().add_row(ProductType.VISA)
    hotel_id, visa_id = (row.row_id for row in composition.rows)
    composition = composition.select_product(visa_id, _visa_product())
    composition = composition.set_row_quantity(visa_id, -5)
    line_id = composition.hotel_row(hotel_id).sub_lines[0].line_id
    composition = composition.set_sub_line_quantity(hotel_id, line_id, "-5")

    visa = composition.row(visa_id)
    hotel = composition.hotel_row(hotel_id)
    assert visa.quantity == 0
    assert row_subtotal(visa) == Decimal("0")
    assert hotel.sub_lines[0].quantity == 0
    assert row_headcount(hotel) == 0


def test_select_product_sets_name_currency_and_price() -> None:
    composition = _composition().add_row(ProductType.VISA)
    visa_id = composition.rows[1].row_id
    composition = composition.select_product(visa_id, _visa_product())

    row = composition.row(visa_id)
    assert row.product_name == "Umrah visa"
    assert row.currency == Currency.IDR
    assert row.unit_price == Decimal("2100000")


def test_selecting_hotel_reprices_existing_sub_lines() -> None:
    composition = _composition()
    row_id = composition.rows[0].row_id
    line_id = composition.hotel_row(row_id).sub_lines[0].line_id
    composition = composition.set_sub_line_room_type(row_id, line_id, RoomType.DOUBLE, None)
    composition = composition.select_product(row_id, _hotel_product())

    assert composition.hotel_row(row_id).sub_lines[0].unit_price == Decimal("150")


def test_selecting_product_of_another_type_is_rejected() -> None:
    composition = _composition()
    with pytest.raises(ProductTypeMismatchError):
        composition.select_product(composition.rows[0].row_id, _visa_product())


def test_changing_type_clears_product_and_hotel_fields() -> None:
    composition = _composition()
    row_id = composition.rows[0].row_id
    composition = composition.select_product(row_id, _hotel_product())
    composition = composition.change_row_type(row_id, ProductType.VISA)

    row = composition.row(row_id)
    assert isinstance(row, SimpleRow)
    assert row.row_type == ProductType.VISA
    assert row.product_id is None
    assert row.product_name == ""
    assert row.unit_price == Decimal("0")


def test_changing_type_into_hotel_seeds_one_sub_line() -> None:
    composition = _composition().add_row(ProductType.BUS)
    row_id = composition.rows[1].row_id
    composition = composition.change_row_type(row_id, ProductType.HOTEL)

    row = composition.hotel_row(row_id)
    assert len(row.sub_lines) == 1
    assert row.sub_lines[0].room_type == RoomType.QUAD
    assert row.sub_lines[0].quantity == 1


def test_changing_to_same_type_is_a_no_op() -> None:
    composition = _composition()
    assert composition.change_row_type(composition.rows[0].row_id, ProductType.HOTEL) is composition


def test_price_write_in_inactive_currency_is_ignored() -> None:
    composition = _composition().add_row(ProductType.VISA)
    visa_id = composition.rows[1].row_id

    assert composition.active_currency == Currency.IDR
    assert composition.write_row_price(visa_id, Currency.SAR, 100) is composition


def test_price_write_converts_into_row_native_currency() -> None:
    composition = _composition()
    row_id = composition.rows[0].row_id
    composition = composition.select_product(row_id, _hotel_product())
    line_id = composition.hotel_row(row_id).sub_lines[0].line_id

    composition = composition.write_sub_line_price(row_id, line_id, Currency.IDR, 420000)
    assert composition.hotel_row(row_id).sub_lines[0].unit_price == Decimal("100")

    composition = composition.set_active_currency(Currency.SAR)
    composition = composition.write_sub_line_price(row_id, line_id, Currency.SAR, "87.5")
    assert composition.hotel_row(row_id).sub_lines[0].unit_price == Decimal("87.5")


def test_row_price_write_converts_usd_into_idr_row() -> None:
    composition = _composition().add_row(ProductType.VISA).set_active_currency(Currency.USD)
    visa_id = composition.rows[1].row_id

    composition = composition.write_row_price(visa_id, Currency.USD, 31)

    assert composition.row(visa_id).unit_price == Decimal("480500")


@pytest.mark.parametrize("raw", ["9e999999", "1e15", "1e-999999", "-9e999999"])
def test_out_of_range_price_write_stores_zero(raw: str) -> None:
    composition = _composition().add_row(ProductType.VISA).set_active_currency(Currency.USD)
    visa_id = composition.rows[1].row_id
    composition = composition.set_row_quantity(visa_id, 3)

    composition = composition.write_row_price(visa_id, Currency.USD, raw)

    assert composition.row(visa_id).unit_price == Decimal("0")
    assert reconcile(composition.rows, composition.rate_set).total_idr == Decimal("0")

def test_row_price_write_on_hotel_row_with_sub_lines_is_rejected() -> None:
    composition = _composition()
    row_id = composition.rows[0].row_id

    with pytest.raises(PricedPerSubLineError):
        composition.write_row_price(row_id, Currency.IDR, 420000)


def test_removing_last_row_leaves_a_fresh_row() -> None:
    composition = _composition()
    old_id = composition.rows[0].row_id

    row = _only_row(composition.remove_row(old_id))
    assert isinstance(row, HotelRow)
    assert row.row_id != old_id


def test_sub_line_commands() -> None:
    composition = _composition()
    row_id = composition.rows[0].row_id
    composition = composition.add_sub_line(row_id, _hotel_product())
    added = composition.hotel_row(row_id).sub_lines[1]
    assert added.unit_price == Decimal("100")

    composition = composition.remove_sub_line(row_id, added.line_id)
    assert len(composition.hotel_row(row_id).sub_lines) == 1

    with pytest.raises(SubLineNotFoundError):
        composition.remove_sub_line(row_id, added.line_id)


def test_unknown_rows_and_non_hotel_rows_raise() -> None:
    composition = _composition().add_row(ProductType.TICKET)

    with pytest.raises(RowNotFoundError):
        composition.set_row_quantity("row_missing", 1)
    with pytest.raises(NotAHotelRowError):
        composition.add_sub_line(composition.rows[1].row_id, None)


def test_rate_set_from_stale_selection_is_dropped() -> None:
    composition = _composition()
    first = composition.with_selection(None, None)
    second = first.with_selection(None, None)
    new_rates = CurrencyRateSet(sar_to_idr=Decimal("4300"), usd_to_idr=Decimal("16000"))

    assert second.apply_rate_set(new_rates, first.selection_version) is second
    assert second.apply_rate_set(new_rates, second.selection_version).rate_set == new_rates
