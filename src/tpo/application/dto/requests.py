from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from tpo.domain.catalog.entities import ProductType
from tpo.domain.common.money import Currency
from tpo.domain.pricing.rooms import RoomType

# Numeric form fields stay loosely typed: bad input is clamped to zero, not rejected.
NumericInput = int | float | str | None


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class StartCompositionRequest(CamelBaseModel):
    role: str
    branch_id: str | None = None
    owner_id: str | None = None
    order_id: str | None = None


class ChangeSelectionRequest(CamelBaseModel):
    branch_id: str | None = None
    owner_id: str | None = None


class ActiveCurrencyRequest(CamelBaseModel):
    currency: Currency


class AddRowRequest(CamelBaseModel):
    type: ProductType = ProductType.HOTEL


class UpdateRowRequest(CamelBaseModel):
    type: ProductType | None = None
    product_id: str | None = None
    quantity: NumericInput = None


class PriceWriteRequest(CamelBaseModel):
    currency: Currency
    value: NumericInput = None


class UpdateSubLineRequest(CamelBaseModel):
    room_type: RoomType | None = None
    quantity: NumericInput = None
    with_meal: bool | None = None


class ResolveTriadRequest(CamelBaseModel):
    currency: Currency
    value: NumericInput = None
    sar_to_idr: NumericInput = None
    usd_to_idr: NumericInput = None


class InvoiceSummaryRequest(CamelBaseModel):
    invoice_id: str | None = None
    status: str
    is_blocked: bool = False
    total_amount: NumericInput = None
    paid_amount: NumericInput = None
    remaining_amount: NumericInput = None


class InvoiceActionsRequest(CamelBaseModel):
    invoice: InvoiceSummaryRequest
    role: str
