from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from tpo.domain.catalog.entities import Product, ProductType, find_product
from tpo.domain.common.ids import ProductId, RowId, SubLineId, new_row_id, new_sub_line_id
from tpo.domain.common.money import CANONICAL_CURRENCY, Currency, CurrencyRateSet, coerce_amount
from tpo.domain.order.entities import HotelRow, OrderLineRow, RoomSubLine, SimpleRow, new_row
from tpo.domain.pricing.rooms import DEFAULT_ROOM_TYPE, RoomType
from tpo.domain.pricing.triad import convert


@dataclass(frozen=True)
class PersistedOrderItem:
    """An order item as the order service stores it: unit price in IDR."""

    item_id: str | None
    row_type: ProductType
    product_id: ProductId | None
    quantity: int
    unit_price_idr: Decimal
    product_name: str = ""
    room_type: RoomType | None = None
    with_meal: bool = False


def _native_price(
    item: PersistedOrderItem,
    product: Product | None,
    rate_set: CurrencyRateSet,
) -> tuple[Currency, Decimal]:
    currency = product.native_currency if product is not None else CANONICAL_CURRENCY
    return currency, coerce_amount(convert(item.unit_price_idr, CANONICAL_CURRENCY, currency, rate_set))


def rows_from_order_items(
    items: Sequence[PersistedOrderItem],
    products: Iterable[Product],
    rate_set: CurrencyRateSet,
) -> tuple[OrderLineRow, ...]:
    """Rebuild editable rows from a stored order.

    Hotel items sharing a product collapse into one hotel row with a sub-line per item.
    """
    catalog = list(products)
    rows: list[OrderLineRow] = []
    seen_hotels: set[str] = set()

    for item in items:
        product = find_product(catalog, item.product_id)
        currency, unit_price = _native_price(item, product, rate_set)
        name = item.product_name or (product.name if product is not None else "")

        if item.row_type == ProductType.HOTEL and item.product_id:
            if str(item.product_id) in seen_hotels:
                continue
            seen_hotels.add(str(item.product_id))
            group = [
                other
                for other in items
                if other.row_type == ProductType.HOTEL and other.product_id == item.product_id
            ]
            rows.append(
                HotelRow(
                    row_id=RowId(item.item_id) if item.item_id else new_row_id(),
                    product_id=item.product_id,
                    product_name=name,
                    currency=currency,
                    quantity=sum(max(0, other.quantity) for other in group),
                    unit_price=unit_price,
                    sub_lines=tuple(
                        RoomSubLine(
                            line_id=SubLineId(other.item_id) if other.item_id else new_sub_line_id(),
                            room_type=other.room_type or DEFAULT_ROOM_TYPE,
                            quantity=max(0, other.quantity),
                            unit_price=_native_price(other, product, rate_set)[1],
                            with_meal=other.with_meal,
                        )
                        for other in group
                    ),
                )
            )
        elif item.row_type == ProductType.HOTEL:
            rows.append(
                HotelRow(
                    row_id=RowId(item.item_id) if item.item_id else new_row_id(),
                    product_name=name,
                    currency=currency,
                    quantity=max(0, item.quantity),
                    unit_price=unit_price,
                    room_type=item.room_type,
                )
            )
        else:
            rows.append(
                SimpleRow(
                    row_id=RowId(item.item_id) if item.item_id else new_row_id(),
                    row_type=item.row_type,
                    product_id=item.product_id,
                    product_name=name,
                    currency=currency,
                    quantity=max(0, item.quantity),
                    unit_price=unit_price,
                )
            )

    return tuple(rows) or (new_row(),)
