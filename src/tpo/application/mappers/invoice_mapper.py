from __future__ import annotations

from tpo.application.dto.requests import InvoiceSummaryRequest
from tpo.application.dto.responses import InvoiceProjectionResponse
from tpo.domain.common.ids import InvoiceId
from tpo.domain.common.money import coerce_amount
from tpo.domain.invoice.entities import InvoiceStatus, InvoiceSummary
from tpo.domain.invoice.projection import InvoiceProjection


def to_invoice_summary(request_dto: InvoiceSummaryRequest) -> InvoiceSummary:
    return InvoiceSummary(
        invoice_id=InvoiceId(request_dto.invoice_id) if request_dto.invoice_id else None,
        status=InvoiceStatus.parse(request_dto.status),
        raw_status=request_dto.status,
        is_blocked=request_dto.is_blocked,
        total_amount=coerce_amount(request_dto.total_amount),
        paid_amount=coerce_amount(request_dto.paid_amount),
        remaining_amount=coerce_amount(request_dto.remaining_amount),
    )


def to_invoice_projection_response(projection: InvoiceProjection) -> InvoiceProjectionResponse:
    return InvoiceProjectionResponse(
        invoiceId=projection.invoice_id,
        status=projection.status,
        label=projection.label,
        category=projection.category.value,
        isBlocked=projection.is_blocked,
        actions=sorted(action.value for action in projection.actions),
    )
