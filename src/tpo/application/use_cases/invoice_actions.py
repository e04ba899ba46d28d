from __future__ import annotations

from tpo.application.dto.requests import InvoiceActionsRequest
from tpo.application.dto.responses import InvoiceProjectionResponse
from tpo.application.mappers.invoice_mapper import to_invoice_projection_response, to_invoice_summary
from tpo.application.metrics.composition import record_collaborator_failure
from tpo.application.ports.collaborators import CollaboratorUnavailableError, InvoiceSource
from tpo.domain.common.ids import InvoiceId
from tpo.domain.invoice.projection import project_invoice


class InvoiceNotFoundError(Exception):
    pass


class GetInvoiceActions:
    def __init__(self, source: InvoiceSource) -> None:
        self._source = source

    def execute(self, invoice_id: InvoiceId, role: str) -> InvoiceProjectionResponse:
        try:
            invoice = self._source.get_invoice(invoice_id)
        except CollaboratorUnavailableError as exc:
            record_collaborator_failure(exc.operation)
            raise
        if invoice is None:
            raise InvoiceNotFoundError(f"invoice not found: {invoice_id}")
        return to_invoice_projection_response(project_invoice(invoice, role))


class ProjectInvoiceActions:
    def execute(self, request_dto: InvoiceActionsRequest) -> InvoiceProjectionResponse:
        invoice = to_invoice_summary(request_dto.invoice)
        return to_invoice_projection_response(project_invoice(invoice, request_dto.role))
