from __future__ import annotations

from fastapi import APIRouter, Query

from tpo.application.dto.requests import InvoiceActionsRequest
from tpo.application.dto.responses import InvoiceProjectionResponse
from tpo.application.use_cases.invoice_actions import GetInvoiceActions, ProjectInvoiceActions
from tpo.domain.common.ids import InvoiceId
from tpo.infrastructure.collaborators.adapters import HttpInvoiceSource
from tpo.infrastructure.collaborators.http_client import get_collaborator_client

router = APIRouter()


def _get_invoice_actions_use_case() -> GetInvoiceActions:
    return GetInvoiceActions(source=HttpInvoiceSource(get_collaborator_client()))


@router.get("/v1/invoices/{invoice_id}/actions", response_model=InvoiceProjectionResponse)
def get_invoice_actions(invoice_id: str, role: str = Query(...)) -> InvoiceProjectionResponse:
    return _get_invoice_actions_use_case().execute(InvoiceId(invoice_id), role)


@router.post("/v1/invoices/actions", response_model=InvoiceProjectionResponse)
def project_invoice_actions(request_dto: InvoiceActionsRequest) -> InvoiceProjectionResponse:
    return ProjectInvoiceActions().execute(request_dto)
