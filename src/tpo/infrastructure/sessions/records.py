from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from tpo.application.ports.sessions import CompositionSession, Notice
from tpo.domain.catalog.entities import PriceTiers, Product, ProductType, RoomPrice
from tpo.domain.common.ids import (
    BranchId,
    CompositionId,
    OrderId,
    OwnerId,
    ProductId,
    RowId,
    SubLineId,
)
from tpo.domain.common.money import Currency, CurrencyRateSet
from tpo.domain.common.roles import Role
from tpo.domain.order.composition import OrderComposition
from tpo.domain.order.entities import HotelRow, OrderLineRow, RoomSubLine, SimpleRow
from tpo.domain.pricing.rooms import RoomType

# Bump when the stored shape changes; older payloads are treated as expired.
SESSION_SCHEMA_VERSION = 1


class RoomPriceRecord(BaseModel):
    quantity: int
    price: Decimal


class ProductRecord(BaseModel):
    productId: str
    code: str
    name: str
    type: ProductType
    currency: Currency
    priceGeneral: Decimal | None = None
    priceBranch: Decimal | None = None
    priceOwner: Decimal | None = None
    isPackage: bool = False
    roomBreakdown: dict[RoomType, RoomPriceRecord] = Field(default_factory=dict)
    mealPrice: Decimal = Decimal("0")


class SubLineRecord(BaseModel):
    lineId: str
    roomType: RoomType
    quantity: int
    unitPrice: Decimal
    withMeal: bool = False


class RowRecord(BaseModel):
    kind: Literal["simple", "hotel"]
    rowId: str
    type: ProductType
    productId: str | None = None
    productName: str = ""
    currency: Currency
    quantity: int
    unitPrice: Decimal
    subLines: list[SubLineRecord] = Field(default_factory=list)
    roomType: RoomType | None = None


class NoticeRecord(BaseModel):
    code: str
    message: str


class SessionRecord(BaseModel):
    schemaVersion: int = SESSION_SCHEMA_VERSION
    compositionId: str
    role: Role | None = None
    branchId: str | None = None
    ownerId: str | None = None
    orderId: str | None = None
    activeCurrency: Currency
    selectionVersion: int
    revision: int = 0
    sarToIdr: Decimal
    usdToIdr: Decimal
    rows: list[RowRecord]
    products: list[ProductRecord] = Field(default_factory=list)
    notices: list[NoticeRecord] = Field(default_factory=list)


def _product_record(product: Product) -> ProductRecord:
    return ProductRecord(
        productId=str(product.product_id),
        code=product.code,
        name=product.name,
        type=product.product_type,
        currency=product.native_currency,
        priceGeneral=product.prices.general,
        priceBranch=product.prices.branch,
        priceOwner=product.prices.owner,
        isPackage=product.is_package,
        roomBreakdown={
            room_type: RoomPriceRecord(quantity=entry.quantity, price=entry.price)
            for room_type, entry in product.room_breakdown.items()
        },
        mealPrice=product.meal_price,
    )


def _product(record: ProductRecord) -> Product:
    return Product(
        product_id=ProductId(record.productId),
        code=record.code,
        name=record.name,
        product_type=record.type,
        native_currency=record.currency,
        prices=PriceTiers(
            general=record.priceGeneral,
            branch=record.priceBranch,
            owner=record.priceOwner,
        ),
        is_package=record.isPackage,
        room_breakdown={
            room_type: RoomPrice(quantity=entry.quantity, price=entry.price)
            for room_type, entry in record.roomBreakdown.items()
        },
        meal_price=record.mealPrice,
    )


def _row_record(row: OrderLineRow) -> RowRecord:
    if isinstance(row, HotelRow):
        return RowRecord(
            kind="hotel",
            rowId=str(row.row_id),
            type=ProductType.HOTEL,
            productId=row.product_id,
            productName=row.product_name,
            currency=row.currency,
            quantity=row.quantity,
            unitPrice=row.unit_price,
            subLines=[
                SubLineRecord(
                    lineId=str(line.line_id),
                    roomType=line.room_type,
                    quantity=line.quantity,
                    unitPrice=line.unit_price,
                    withMeal=line.with_meal,
                )
                for line in row.sub_lines
            ],
            roomType=row.room_type,
        )
    return RowRecord(
        kind="simple",
        rowId=str(row.row_id),
        type=row.row_type,
        productId=row.product_id,
        productName=row.product_name,
        currency=row.currency,
        quantity=row.quantity,
        unitPrice=row.unit_price,
    )


def _row(record: RowRecord) -> OrderLineRow:
    product_id = ProductId(record.productId) if record.productId else None
    if record.kind == "hotel":
        return HotelRow(
            row_id=RowId(record.rowId),
            product_id=product_id,
            product_name=record.productName,
            currency=record.currency,
            quantity=record.quantity,
            unit_price=record.unitPrice,
            sub_lines=tuple(
                RoomSubLine(
                    line_id=SubLineId(line.lineId),
                    room_type=line.roomType,
                    quantity=line.quantity,
                    unit_price=line.unitPrice,
                    with_meal=line.withMeal,
                )
                for line in record.subLines
            ),
            room_type=record.roomType,
        )
    return SimpleRow(
        row_id=RowId(record.rowId),
        row_type=record.type,
        product_id=product_id,
        product_name=record.productName,
        currency=record.currency,
        quantity=record.quantity,
        unit_price=record.unitPrice,
    )


def to_session_record(session: CompositionSession) -> SessionRecord:
    composition = session.composition
    return SessionRecord(
        compositionId=str(composition.composition_id),
        role=session.role,
        branchId=composition.branch_id,
        ownerId=composition.owner_id,
        orderId=composition.order_id,
        activeCurrency=composition.active_currency,
        selectionVersion=composition.selection_version,
        revision=session.revision,
        sarToIdr=composition.rate_set.sar_to_idr,
        usdToIdr=composition.rate_set.usd_to_idr,
        rows=[_row_record(row) for row in composition.rows],
        products=[_product_record(product) for product in session.products],
        notices=[NoticeRecord(code=notice.code, message=notice.message) for notice in session.notices],
    )


def from_session_record(record: SessionRecord) -> CompositionSession:
    composition = OrderComposition(
        composition_id=CompositionId(record.compositionId),
        rows=tuple(_row(row) for row in record.rows),
        rate_set=CurrencyRateSet(sar_to_idr=record.sarToIdr, usd_to_idr=record.usdToIdr),
        branch_id=BranchId(record.branchId) if record.branchId else None,
        owner_id=OwnerId(record.ownerId) if record.ownerId else None,
        order_id=OrderId(record.orderId) if record.orderId else None,
        active_currency=record.activeCurrency,
        selection_version=record.selectionVersion,
    )
    return CompositionSession(
        composition=composition,
        role=record.role,
        products=tuple(_product(product) for product in record.products),
        notices=tuple(Notice(code=notice.code, message=notice.message) for notice in record.notices),
        revision=record.revision,
    )
