from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class TriadResponse(BaseModel):
    idr: Decimal
    sar: Decimal
    usd: Decimal
    display: dict[str, str] = Field(default_factory=dict)


class RateSetResponse(BaseModel):
    sarToIdr: Decimal
    usdToIdr: Decimal
    isDefault: bool


class SubLineResponse(BaseModel):
    lineId: str
    roomType: str
    capacity: int
    quantity: int
    withMeal: bool
    unitPrice: Decimal
    unitPriceTriad: TriadResponse
    subtotal: Decimal
    headcount: int


class RowResponse(BaseModel):
    rowId: str
    type: str
    productId: str | None = None
    productName: str
    currency: str
    quantity: int
    unitPrice: Decimal
    unitPriceTriad: TriadResponse
    roomType: str | None = None
    subLines: list[SubLineResponse] = Field(default_factory=list)
    subtotal: Decimal
    subtotalDisplay: str
    subtotalSar: Decimal
    headcount: int


class TotalsResponse(BaseModel):
    totalSar: Decimal
    totalIdr: Decimal
    totalUsd: Decimal
    totalHeadcount: int
    display: dict[str, str] = Field(default_factory=dict)


class NoticeResponse(BaseModel):
    code: str
    message: str


class ProductOptionResponse(BaseModel):
    productId: str
    code: str
    name: str
    type: str
    isPackage: bool
    currency: str
    effectivePrice: Decimal


class CompositionResponse(BaseModel):
    compositionId: str
    orderId: str | None = None
    branchId: str | None = None
    ownerId: str | None = None
    role: str | None = None
    activeCurrency: str
    priceEditable: bool
    selectionVersion: int
    rateSet: RateSetResponse
    rows: list[RowResponse] = Field(default_factory=list)
    totals: TotalsResponse
    notices: list[NoticeResponse] = Field(default_factory=list)
    productOptions: list[ProductOptionResponse] = Field(default_factory=list)


class SubmitOrderResponse(BaseModel):
    orderId: str
    mode: str
    itemCount: int
    totals: TotalsResponse


class InvoiceProjectionResponse(BaseModel):
    invoiceId: str | None = None
    status: str
    label: str
    category: str
    isBlocked: bool
    actions: list[str] = Field(default_factory=list)
