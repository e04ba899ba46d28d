from __future__ import annotations

from tpo.application.ports.collaborators import (
    CollaboratorUnavailableError,
    InvoiceSource,
    OrderSource,
    OrderSubmitter,
    ProductSource,
    RateSetSource,
)
from tpo.domain.catalog.entities import Product, ProductType
from tpo.domain.common.ids import BranchId, InvoiceId, OrderId, OwnerId
from tpo.domain.common.money import CurrencyRateSet
from tpo.domain.invoice.entities import InvoiceSummary
from tpo.domain.order.hydrate import PersistedOrderItem
from tpo.domain.order.submission import OrderSubmission
from tpo.infrastructure.collaborators.http_client import HttpCollaboratorClient
from tpo.infrastructure.collaborators.payloads import (
    parse_invoice,
    parse_order_items,
    parse_products,
    parse_rate_set,
    submission_payload,
)

PRODUCT_PAGE_LIMIT = 500


class HttpRateSetSource(RateSetSource):
    def __init__(self, client: HttpCollaboratorClient) -> None:
        self._client = client

    def get_rate_set(self, branch_id: BranchId | None) -> CurrencyRateSet | None:
        params = {"branch_id": branch_id} if branch_id else None
        data = self._client.request("GET", "/business-rules", "get_business_rules", params=params)
        return parse_rate_set(data)


class HttpProductSource(ProductSource):
    def __init__(self, client: HttpCollaboratorClient) -> None:
        self._client = client

    def list_products(
        self,
        branch_id: BranchId | None,
        owner_id: OwnerId | None,
        product_type: ProductType | None = None,
    ) -> list[Product]:
        params: dict[str, object] = {
            "with_prices": "true",
            "include_inactive": "false",
            "limit": PRODUCT_PAGE_LIMIT,
        }
        if branch_id:
            params["branch_id"] = branch_id
        if owner_id:
            params["owner_id"] = owner_id
        if product_type is not None:
            params["type"] = product_type.value
        data = self._client.request("GET", "/products", "list_products", params=params)
        return parse_products(data)


class HttpOrderSource(OrderSource):
    def __init__(self, client: HttpCollaboratorClient) -> None:
        self._client = client

    def get_order_items(self, order_id: OrderId) -> list[PersistedOrderItem] | None:
        data = self._client.request("GET", f"/orders/{order_id}", "get_order")
        if data is None:
            return None
        return parse_order_items(data)


class HttpOrderSubmitter(OrderSubmitter):
    def __init__(self, client: HttpCollaboratorClient) -> None:
        self._client = client

    def create(self, submission: OrderSubmission) -> OrderId:
        data = self._client.request("POST", "/orders", "create_order", json=submission_payload(submission))
        if not isinstance(data, dict) or not data.get("id"):
            raise CollaboratorUnavailableError("create_order returned no order id", "create_order")
        return OrderId(str(data["id"]))

    def update(self, order_id: OrderId, submission: OrderSubmission) -> OrderId:
        self._client.request(
            "PUT",
            f"/orders/{order_id}",
            "update_order",
            json=submission_payload(submission),
        )
        return order_id


class HttpInvoiceSource(InvoiceSource):
    def __init__(self, client: HttpCollaboratorClient) -> None:
        self._client = client

    def get_invoice(self, invoice_id: InvoiceId) -> InvoiceSummary | None:
        data = self._client.request("GET", f"/invoices/{invoice_id}", "get_invoice")
        if data is None:
            return None
        return parse_invoice(data)
