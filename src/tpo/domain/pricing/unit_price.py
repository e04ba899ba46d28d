from __future__ import annotations

from decimal import Decimal

from tpo.domain.catalog.entities import Product, effective_price
from tpo.domain.common.money import ZERO, coerce_amount
from tpo.domain.pricing.rooms import RoomType


def price_for(product: Product | None, room_type: RoomType | str | None, with_meal: bool) -> Decimal:
    """Unit price of one room of ``room_type`` in the product's native currency.

    Falls back to the effective tier price when the product has no entry for the room type.
    """
    if product is None:
        return ZERO

    parsed = RoomType.parse(room_type)
    entry = product.room_breakdown.get(parsed) if parsed is not None else None
    base = coerce_amount(entry.price) if entry is not None else effective_price(product)
    if with_meal:
        return coerce_amount(base + coerce_amount(product.meal_price))
    return base
