from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping

from tpo.domain.common.ids import ProductId
from tpo.domain.common.money import ZERO, Currency, coerce_amount
from tpo.domain.pricing.rooms import RoomType


class ProductType(str, Enum):
    HOTEL = "hotel"
    VISA = "visa"
    TICKET = "ticket"
    BUS = "bus"
    HANDLING = "handling"
    PACKAGE = "package"

    @classmethod
    def parse(cls, value: object) -> ProductType | None:
        if isinstance(value, ProductType):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class PriceTiers:
    general: Decimal | None = None
    branch: Decimal | None = None
    owner: Decimal | None = None


@dataclass(frozen=True)
class RoomPrice:
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class Product:
    product_id: ProductId
    code: str
    name: str
    product_type: ProductType
    native_currency: Currency
    prices: PriceTiers = field(default_factory=PriceTiers)
    is_package: bool = False
    room_breakdown: Mapping[RoomType, RoomPrice] = field(default_factory=dict)
    meal_price: Decimal = ZERO

    def __post_init__(self) -> None:
        if self.native_currency not in (Currency.IDR, Currency.SAR):
            raise ValueError("product native currency must be IDR or SAR")


def effective_price(product: Product | None) -> Decimal:
    """Owner tier, else branch tier, else general tier; zero when none is set."""
    if product is None:
        return ZERO
    tiers = product.prices
    for candidate in (tiers.owner, tiers.branch, tiers.general):
        if candidate is not None:
            return coerce_amount(candidate)
    return ZERO


def offered_for(product: Product, row_type: ProductType) -> bool:
    if row_type == ProductType.PACKAGE:
        return product.is_package
    return not product.is_package and product.product_type == row_type


def products_for_type(products: Iterable[Product], row_type: ProductType) -> list[Product]:
    return [product for product in products if offered_for(product, row_type)]


def find_product(
    products: Iterable[Product],
    product_id: ProductId | str | None,
    row_type: ProductType | None = None,
) -> Product | None:
    if not product_id:
        return None
    for product in products:
        if str(product.product_id) != str(product_id):
            continue
        if row_type is not None and not offered_for(product, row_type):
            return None
        return product
    return None
