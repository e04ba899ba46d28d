"""Translation between the ordering backend's JSON and the pricing domain.

The backend answers in snake_case, nests free-form ``meta`` objects that are sometimes
stored as JSON strings, and sends numbers as either JSON numbers or decimal strings.
Parsing here is lenient: malformed entries are skipped or defaulted, never raised.
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Any

from tpo.domain.catalog.entities import PriceTiers, Product, ProductType, RoomPrice
from tpo.domain.common.ids import InvoiceId, ProductId
from tpo.domain.common.money import Currency, CurrencyRateSet, coerce_amount, coerce_quantity
from tpo.domain.invoice.entities import InvoiceStatus, InvoiceSummary
from tpo.domain.order.hydrate import PersistedOrderItem
from tpo.domain.order.submission import OrderSubmission, SubmissionItem
from tpo.domain.pricing.rooms import RoomType


def _mapping(value: Any) -> dict[str, Any]:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    return value if isinstance(value, dict) else {}


def _decimal_or_none(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def _rate(value: Any) -> Decimal | None:
    # string rates are ignored, matching how the order form reads business rules
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return _decimal_or_none(value)


def parse_rate_set(data: Any) -> CurrencyRateSet | None:
    rates = _mapping(_mapping(data).get("currency_rates"))
    if not rates:
        return None
    sar_to_idr = _rate(rates.get("SAR_TO_IDR"))
    usd_to_idr = _rate(rates.get("USD_TO_IDR"))
    if sar_to_idr is None and usd_to_idr is None:
        return None
    return CurrencyRateSet.of(sar_to_idr, usd_to_idr)


def _room_breakdown(raw: dict[str, Any], meta: dict[str, Any]) -> dict[RoomType, RoomPrice]:
    source = _mapping(raw.get("room_breakdown")) or _mapping(raw.get("prices_by_room"))
    source = source or _mapping(meta.get("room_breakdown"))
    breakdown: dict[RoomType, RoomPrice] = {}
    for key, entry in source.items():
        room_type = RoomType.parse(key)
        if room_type is None:
            continue
        if isinstance(entry, dict):
            price = _decimal_or_none(entry.get("price"))
            quantity = coerce_quantity(entry.get("quantity"))
        else:
            price = _decimal_or_none(entry)
            quantity = 0
        if price is None:
            continue
        breakdown[room_type] = RoomPrice(quantity=quantity, price=price)
    return breakdown


def parse_product(raw: Any) -> Product | None:
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    is_package = bool(raw.get("is_package"))
    product_type = ProductType.parse(raw.get("type"))
    if product_type is None:
        if not is_package:
            return None
        product_type = ProductType.PACKAGE

    currency = Currency.parse(raw.get("currency"))
    if currency not in (Currency.IDR, Currency.SAR):
        currency = Currency.IDR

    meta = _mapping(raw.get("meta"))
    return Product(
        product_id=ProductId(str(raw["id"])),
        code=str(raw.get("code") or ""),
        name=str(raw.get("name") or ""),
        product_type=product_type,
        native_currency=currency,
        prices=PriceTiers(
            general=_decimal_or_none(raw.get("price_general")),
            branch=_decimal_or_none(raw.get("price_branch")),
            owner=_decimal_or_none(raw.get("price_owner")),
        ),
        is_package=is_package,
        room_breakdown=_room_breakdown(raw, meta),
        meal_price=coerce_amount(meta.get("meal_price")),
    )


def parse_products(data: Any) -> list[Product]:
    if not isinstance(data, list):
        return []
    return [product for product in (parse_product(raw) for raw in data) if product is not None]


def _order_item(raw: dict[str, Any]) -> PersistedOrderItem | None:
    row_type = ProductType.parse(raw.get("type") or ProductType.HOTEL.value)
    if row_type is None:
        return None
    meta = _mapping(raw.get("meta"))
    product_ref = raw.get("product_ref_id") or raw.get("product_id")
    product = raw.get("Product") if isinstance(raw.get("Product"), dict) else {}
    with_meal = meta.get("with_meal")
    if with_meal is None:
        with_meal = meta.get("meal", False)
    quantity = raw.get("quantity")
    return PersistedOrderItem(
        item_id=str(raw["id"]) if raw.get("id") else None,
        row_type=row_type,
        product_id=ProductId(str(product_ref)) if product_ref else None,
        quantity=1 if quantity is None else coerce_quantity(quantity),
        unit_price_idr=coerce_amount(raw.get("unit_price")),
        product_name=str(product.get("name") or ""),
        room_type=RoomType.parse(meta.get("room_type") or raw.get("room_type")),
        with_meal=bool(with_meal),
    )


def parse_order_items(data: Any) -> list[PersistedOrderItem]:
    items = _mapping(data).get("OrderItems")
    if not isinstance(items, list):
        return []
    parsed = (_order_item(raw) for raw in items if isinstance(raw, dict))
    return [item for item in parsed if item is not None]


def parse_invoice(data: Any) -> InvoiceSummary | None:
    raw = _mapping(data)
    if not raw:
        return None
    raw_status = str(raw.get("status") or "")
    return InvoiceSummary(
        invoice_id=InvoiceId(str(raw["id"])) if raw.get("id") else None,
        status=InvoiceStatus.parse(raw_status),
        raw_status=raw_status,
        is_blocked=bool(raw.get("is_blocked")),
        total_amount=coerce_amount(raw.get("total_amount")),
        paid_amount=coerce_amount(raw.get("paid_amount")),
        remaining_amount=coerce_amount(raw.get("remaining_amount")),
    )


def _item_payload(item: SubmissionItem) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "product_id": str(item.product_id),
        "type": item.row_type.value,
        "product_ref_type": item.product_ref_type,
        "quantity": item.quantity,
        "unit_price": float(item.unit_price_idr),
    }
    if item.room_type is not None:
        payload["room_type"] = item.room_type.value
        payload["meta"] = {"room_type": item.room_type.value}
    if item.with_meal is not None:
        payload["meal"] = item.with_meal
        payload.setdefault("meta", {})["with_meal"] = item.with_meal
    return payload


def submission_payload(submission: OrderSubmission) -> dict[str, Any]:
    body: dict[str, Any] = {"items": [_item_payload(item) for item in submission.items]}
    if submission.branch_id:
        body["branch_id"] = str(submission.branch_id)
    if submission.owner_id:
        body["owner_id"] = str(submission.owner_id)
    return body
