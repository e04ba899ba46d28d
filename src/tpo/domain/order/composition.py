from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Callable

from tpo.domain.catalog.entities import Product, ProductType, effective_price, offered_for
from tpo.domain.common.ids import BranchId, CompositionId, OrderId, OwnerId, RowId, SubLineId
from tpo.domain.common.money import ZERO, Currency, CurrencyRateSet, coerce_amount, coerce_quantity
from tpo.domain.order.entities import (
    HotelRow,
    OrderLineRow,
    RoomSubLine,
    SimpleRow,
    default_sub_line,
    new_row,
)
from tpo.domain.pricing.rooms import RoomType
from tpo.domain.pricing.triad import from_idr, to_idr
from tpo.domain.pricing.unit_price import price_for


class RowNotFoundError(Exception):
    pass


class SubLineNotFoundError(Exception):
    pass


class NotAHotelRowError(Exception):
    pass


class ProductTypeMismatchError(Exception):
    pass


class PricedPerSubLineError(Exception):
    pass


@dataclass(frozen=True)
class OrderComposition:
    """One order-form editing session.

    Every command returns a new composition. Price writes are accepted only in
    ``active_currency``; writes in any other currency return the composition unchanged.
    A hotel row with sub-lines is priced per sub-line, never through ``write_row_price``.
    ``selection_version`` increases on every branch/owner change so that rate sets fetched
    for an earlier selection can be recognised and dropped.
    """

    composition_id: CompositionId
    rows: tuple[OrderLineRow, ...]
    rate_set: CurrencyRateSet = field(default_factory=CurrencyRateSet)
    branch_id: BranchId | None = None
    owner_id: OwnerId | None = None
    order_id: OrderId | None = None
    active_currency: Currency = Currency.IDR
    selection_version: int = 0

    def __post_init__(self) -> None:
        if not self.rows:
            raise ValueError("composition must contain at least one row")
        row_ids = [str(row.row_id) for row in self.rows]
        if len(set(row_ids)) != len(row_ids):
            raise ValueError("row ids must be unique")

    @property
    def is_edit(self) -> bool:
        return self.order_id is not None

    def row(self, row_id: RowId | str) -> OrderLineRow:
        for row in self.rows:
            if str(row.row_id) == str(row_id):
                return row
        raise RowNotFoundError(f"row not found: {row_id}")

    def hotel_row(self, row_id: RowId | str) -> HotelRow:
        row = self.row(row_id)
        if not isinstance(row, HotelRow):
            raise NotAHotelRowError(f"row {row_id} is not a hotel row")
        return row

    def _with_row(self, row_id: RowId | str, update: Callable[[OrderLineRow], OrderLineRow]) -> OrderComposition:
        current = self.row(row_id)
        updated = update(current)
        if updated == current:
            return self
        rows = tuple(updated if row is current else row for row in self.rows)
        return replace(self, rows=rows)

    def _with_sub_line(
        self,
        row_id: RowId | str,
        line_id: SubLineId | str,
        update: Callable[[HotelRow, RoomSubLine], RoomSubLine],
    ) -> OrderComposition:
        row = self.hotel_row(row_id)
        line = row.sub_line(line_id)
        if line is None:
            raise SubLineNotFoundError(f"sub-line not found: {line_id}")
        updated = update(row, line)
        sub_lines = tuple(updated if item is line else item for item in row.sub_lines)
        return self._with_row(row_id, lambda _: replace(row, sub_lines=sub_lines))

    def add_row(self, row_type: ProductType = ProductType.HOTEL) -> OrderComposition:
        return replace(self, rows=self.rows + (new_row(row_type),))

    def remove_row(self, row_id: RowId | str) -> OrderComposition:
        target = self.row(row_id)
        remaining = tuple(row for row in self.rows if row is not target)
        return replace(self, rows=remaining or (new_row(),))

    def change_row_type(
        self,
        row_id: RowId | str,
        row_type: ProductType,
        product: Product | None = None,
    ) -> OrderComposition:
        def update(row: OrderLineRow) -> OrderLineRow:
            if row.row_type == row_type:
                return row
            if row_type == ProductType.HOTEL:
                return HotelRow(
                    row_id=row.row_id,
                    quantity=row.quantity,
                    sub_lines=(default_sub_line(product),),
                )
            return SimpleRow(row_id=row.row_id, row_type=row_type, quantity=row.quantity)

        return self._with_row(row_id, update)

    def select_product(self, row_id: RowId | str, product: Product | None) -> OrderComposition:
        def update(row: OrderLineRow) -> OrderLineRow:
            if product is None:
                return replace(row, product_id=None, product_name="", unit_price=ZERO)
            if not offered_for(product, row.row_type):
                raise ProductTypeMismatchError(
                    f"product {product.product_id} cannot be used on a {row.row_type.value} row"
                )
            selected = replace(
                row,
                product_id=product.product_id,
                product_name=product.name,
                currency=product.native_currency,
                unit_price=effective_price(product),
            )
            if not isinstance(selected, HotelRow):
                return selected
            if not selected.sub_lines:
                return replace(selected, sub_lines=(default_sub_line(product),))
            return replace(
                selected,
                sub_lines=tuple(
                    replace(line, unit_price=price_for(product, line.room_type, line.with_meal))
                    for line in selected.sub_lines
                ),
            )

        return self._with_row(row_id, update)

    def set_row_quantity(self, row_id: RowId | str, quantity: object) -> OrderComposition:
        return self._with_row(row_id, lambda row: replace(row, quantity=coerce_quantity(quantity)))

    def add_sub_line(self, row_id: RowId | str, product: Product | None) -> OrderComposition:
        row = self.hotel_row(row_id)
        return self._with_row(
            row_id,
            lambda _: replace(row, sub_lines=row.sub_lines + (default_sub_line(product),)),
        )

    def remove_sub_line(self, row_id: RowId | str, line_id: SubLineId | str) -> OrderComposition:
        row = self.hotel_row(row_id)
        line = row.sub_line(line_id)
        if line is None:
            raise SubLineNotFoundError(f"sub-line not found: {line_id}")
        remaining = tuple(item for item in row.sub_lines if item is not line)
        return self._with_row(row_id, lambda _: replace(row, sub_lines=remaining))

    def set_sub_line_room_type(
        self,
        row_id: RowId | str,
        line_id: SubLineId | str,
        room_type: RoomType,
        product: Product | None,
    ) -> OrderComposition:
        return self._with_sub_line(
            row_id,
            line_id,
            lambda _, line: replace(
                line,
                room_type=room_type,
                unit_price=price_for(product, room_type, line.with_meal),
            ),
        )

    def set_sub_line_quantity(
        self,
        row_id: RowId | str,
        line_id: SubLineId | str,
        quantity: object,
    ) -> OrderComposition:
        return self._with_sub_line(
            row_id,
            line_id,
            lambda _, line: replace(line, quantity=coerce_quantity(quantity)),
        )

    def set_sub_line_meal(
        self,
        row_id: RowId | str,
        line_id: SubLineId | str,
        with_meal: bool,
        product: Product | None,
    ) -> OrderComposition:
        return self._with_sub_line(
            row_id,
            line_id,
            lambda _, line: replace(
                line,
                with_meal=with_meal,
                unit_price=price_for(product, line.room_type, with_meal),
            ),
        )

    def toggle_sub_line_meal(
        self,
        row_id: RowId | str,
        line_id: SubLineId | str,
        product: Product | None,
    ) -> OrderComposition:
        line = self.hotel_row(row_id).sub_line(line_id)
        if line is None:
            raise SubLineNotFoundError(f"sub-line not found: {line_id}")
        return self.set_sub_line_meal(row_id, line_id, not line.with_meal, product)

    def set_active_currency(self, currency: Currency) -> OrderComposition:
        if currency == self.active_currency:
            return self
        return replace(self, active_currency=currency)

    def _native_price(self, row: OrderLineRow, currency: Currency, value: object) -> Decimal:
        idr = to_idr(currency, coerce_amount(value), self.rate_set)
        # a native price outside the input range is stored as zero
        return coerce_amount(from_idr(row.currency, idr, self.rate_set))

    def write_row_price(self, row_id: RowId | str, currency: Currency, value: object) -> OrderComposition:
        row = self.row(row_id)
        if isinstance(row, HotelRow) and row.sub_lines:
            raise PricedPerSubLineError(f"hotel row {row_id} is priced per sub-line")
        if currency != self.active_currency:
            return self
        return self._with_row(
            row_id,
            lambda _: replace(row, unit_price=self._native_price(row, currency, value)),
        )

    def write_sub_line_price(
        self,
        row_id: RowId | str,
        line_id: SubLineId | str,
        currency: Currency,
        value: object,
    ) -> OrderComposition:
        row = self.hotel_row(row_id)
        if row.sub_line(line_id) is None:
            raise SubLineNotFoundError(f"sub-line not found: {line_id}")
        if currency != self.active_currency:
            return self
        return self._with_sub_line(
            row_id,
            line_id,
            lambda _, line: replace(line, unit_price=self._native_price(row, currency, value)),
        )

    def with_selection(self, branch_id: BranchId | None, owner_id: OwnerId | None) -> OrderComposition:
        return replace(
            self,
            branch_id=branch_id,
            owner_id=owner_id,
            selection_version=self.selection_version + 1,
        )

    def is_current(self, selection_version: int) -> bool:
        return selection_version == self.selection_version

    def apply_rate_set(self, rate_set: CurrencyRateSet, selection_version: int) -> OrderComposition:
        if not self.is_current(selection_version):
            return self
        return replace(self, rate_set=rate_set.normalized())


def start_composition(
    composition_id: CompositionId,
    rate_set: CurrencyRateSet,
    branch_id: BranchId | None = None,
    owner_id: OwnerId | None = None,
    order_id: OrderId | None = None,
    rows: tuple[OrderLineRow, ...] = (),
) -> OrderComposition:
    return OrderComposition(
        composition_id=composition_id,
        rows=rows or (new_row(),),
        rate_set=rate_set.normalized(),
        branch_id=branch_id,
        owner_id=owner_id,
        order_id=order_id,
    )
