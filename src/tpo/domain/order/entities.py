from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tpo.domain.catalog.entities import Product, ProductType
from tpo.domain.common.ids import ProductId, RowId, SubLineId, new_row_id, new_sub_line_id
from tpo.domain.common.money import ZERO, Currency, CurrencyRateSet, coerce_amount
from tpo.domain.pricing.rooms import DEFAULT_ROOM_TYPE, RoomType, capacity_of
from tpo.domain.pricing.triad import CurrencyTriad, idr_triad, to_idr
from tpo.domain.pricing.unit_price import price_for


@dataclass(frozen=True)
class RoomSubLine:
    line_id: SubLineId
    room_type: RoomType
    quantity: int
    unit_price: Decimal
    with_meal: bool = False


@dataclass(frozen=True)
class SimpleRow:
    row_id: RowId
    row_type: ProductType
    product_id: ProductId | None = None
    product_name: str = ""
    currency: Currency = Currency.IDR
    quantity: int = 1
    unit_price: Decimal = ZERO

    def __post_init__(self) -> None:
        if self.row_type == ProductType.HOTEL:
            raise ValueError("hotel rows must be built as HotelRow")


@dataclass(frozen=True)
class HotelRow:
    row_id: RowId
    product_id: ProductId | None = None
    product_name: str = ""
    currency: Currency = Currency.IDR
    quantity: int = 1
    unit_price: Decimal = ZERO
    sub_lines: tuple[RoomSubLine, ...] = ()
    # only set on rows rebuilt from orders that predate per-room sub-lines
    room_type: RoomType | None = None

    @property
    def row_type(self) -> ProductType:
        return ProductType.HOTEL

    def sub_line(self, line_id: SubLineId | str) -> RoomSubLine | None:
        for line in self.sub_lines:
            if str(line.line_id) == str(line_id):
                return line
        return None


OrderLineRow = SimpleRow | HotelRow


def default_sub_line(product: Product | None = None) -> RoomSubLine:
    return RoomSubLine(
        line_id=new_sub_line_id(),
        room_type=DEFAULT_ROOM_TYPE,
        quantity=1,
        unit_price=price_for(product, DEFAULT_ROOM_TYPE, False),
        with_meal=False,
    )


def new_row(row_type: ProductType = ProductType.HOTEL, row_id: RowId | None = None) -> OrderLineRow:
    identifier = row_id or new_row_id()
    if row_type == ProductType.HOTEL:
        return HotelRow(row_id=identifier, sub_lines=(default_sub_line(),))
    return SimpleRow(row_id=identifier, row_type=row_type)


def _line_amount(quantity: int, unit_price: Decimal) -> Decimal:
    return max(0, quantity) * coerce_amount(unit_price)


def row_subtotal(row: OrderLineRow) -> Decimal:
    """Row amount in the row's native currency."""
    if isinstance(row, HotelRow) and row.sub_lines:
        return sum(
            (_line_amount(line.quantity, line.unit_price) for line in row.sub_lines),
            ZERO,
        )
    return _line_amount(row.quantity, row.unit_price)


def row_headcount(row: OrderLineRow) -> int:
    if not isinstance(row, HotelRow):
        return 0
    if row.sub_lines:
        return sum(max(0, line.quantity) * capacity_of(line.room_type) for line in row.sub_lines)
    if row.room_type is not None:
        return max(0, row.quantity) * capacity_of(row.room_type)
    return 0


def is_submittable(row: OrderLineRow) -> bool:
    if not row.product_id:
        return False
    if isinstance(row, HotelRow):
        if any(line.quantity > 0 for line in row.sub_lines):
            return True
        return row.room_type is not None and row.quantity > 0
    return row.quantity > 0


def row_price_triad(row: OrderLineRow, rate_set: CurrencyRateSet) -> CurrencyTriad:
    return idr_triad(to_idr(row.currency, row.unit_price, rate_set), rate_set)


def sub_line_price_triad(
    row: HotelRow,
    line: RoomSubLine,
    rate_set: CurrencyRateSet,
) -> CurrencyTriad:
    return idr_triad(to_idr(row.currency, line.unit_price, rate_set), rate_set)
