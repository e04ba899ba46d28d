from __future__ import annotations

from tpo.application.dto.responses import (
    CompositionResponse,
    NoticeResponse,
    ProductOptionResponse,
    RateSetResponse,
    RowResponse,
    SubLineResponse,
    TotalsResponse,
    TriadResponse,
)
from tpo.application.ports.sessions import CompositionSession
from tpo.domain.catalog.entities import Product, effective_price
from tpo.domain.common.money import Currency, CurrencyRateSet, format_amount, round_amount
from tpo.domain.common.roles import can_edit_prices
from tpo.domain.order.entities import (
    HotelRow,
    OrderLineRow,
    row_headcount,
    row_price_triad,
    row_subtotal,
    sub_line_price_triad,
)
from tpo.domain.order.reconcile import OrderTotals, reconcile, row_subtotal_sar
from tpo.domain.pricing.rooms import capacity_of
from tpo.domain.pricing.triad import CurrencyTriad


def to_triad_response(triad: CurrencyTriad) -> TriadResponse:
    rounded = triad.rounded()
    return TriadResponse(
        idr=rounded.idr,
        sar=rounded.sar,
        usd=rounded.usd,
        display=rounded.formatted(),
    )


def to_totals_response(totals: OrderTotals) -> TotalsResponse:
    rounded = totals.triad().rounded()
    return TotalsResponse(
        totalSar=rounded.sar,
        totalIdr=rounded.idr,
        totalUsd=rounded.usd,
        totalHeadcount=totals.total_headcount,
        display=rounded.formatted(),
    )


def _to_row_response(row: OrderLineRow, rate_set: CurrencyRateSet) -> RowResponse:
    sub_lines: list[SubLineResponse] = []
    room_type = None
    if isinstance(row, HotelRow):
        room_type = row.room_type.value if row.room_type else None
        sub_lines = [
            SubLineResponse(
                lineId=str(line.line_id),
                roomType=line.room_type.value,
                capacity=capacity_of(line.room_type),
                quantity=line.quantity,
                withMeal=line.with_meal,
                unitPrice=round_amount(row.currency, line.unit_price),
                unitPriceTriad=to_triad_response(sub_line_price_triad(row, line, rate_set)),
                subtotal=round_amount(row.currency, max(0, line.quantity) * line.unit_price),
                headcount=max(0, line.quantity) * capacity_of(line.room_type),
            )
            for line in row.sub_lines
        ]

    subtotal = row_subtotal(row)
    return RowResponse(
        rowId=str(row.row_id),
        type=row.row_type.value,
        productId=str(row.product_id) if row.product_id else None,
        productName=row.product_name,
        currency=row.currency.value,
        quantity=row.quantity,
        unitPrice=round_amount(row.currency, row.unit_price),
        unitPriceTriad=to_triad_response(row_price_triad(row, rate_set)),
        roomType=room_type,
        subLines=sub_lines,
        subtotal=round_amount(row.currency, subtotal),
        subtotalDisplay=format_amount(row.currency, subtotal),
        subtotalSar=round_amount(Currency.SAR, row_subtotal_sar(row, rate_set)),
        headcount=row_headcount(row),
    )


def _to_product_option(product: Product) -> ProductOptionResponse:
    return ProductOptionResponse(
        productId=str(product.product_id),
        code=product.code,
        name=product.name,
        type=product.product_type.value,
        isPackage=product.is_package,
        currency=product.native_currency.value,
        effectivePrice=effective_price(product),
    )


def to_composition_response(session: CompositionSession) -> CompositionResponse:
    composition = session.composition
    rate_set = composition.rate_set
    return CompositionResponse(
        compositionId=str(composition.composition_id),
        orderId=str(composition.order_id) if composition.order_id else None,
        branchId=str(composition.branch_id) if composition.branch_id else None,
        ownerId=str(composition.owner_id) if composition.owner_id else None,
        role=session.role.value if session.role else None,
        activeCurrency=composition.active_currency.value,
        priceEditable=can_edit_prices(session.role),
        selectionVersion=composition.selection_version,
        rateSet=RateSetResponse(
            sarToIdr=rate_set.sar_to_idr,
            usdToIdr=rate_set.usd_to_idr,
            isDefault=rate_set.is_default,
        ),
        rows=[_to_row_response(row, rate_set) for row in composition.rows],
        totals=to_totals_response(reconcile(composition.rows, rate_set)),
        notices=[NoticeResponse(code=notice.code, message=notice.message) for notice in session.notices],
        productOptions=[_to_product_option(product) for product in session.products],
    )
