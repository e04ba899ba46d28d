from __future__ import annotations

from typing import Protocol

from tpo.domain.catalog.entities import Product, ProductType
from tpo.domain.common.ids import BranchId, InvoiceId, OrderId, OwnerId
from tpo.domain.common.money import CurrencyRateSet
from tpo.domain.invoice.entities import InvoiceSummary
from tpo.domain.order.hydrate import PersistedOrderItem
from tpo.domain.order.submission import OrderSubmission


class CollaboratorUnavailableError(Exception):
    def __init__(self, message: str, operation: str) -> None:
        super().__init__(message)
        self.operation = operation
        self.details = {"operation": operation}


class RateSetSource(Protocol):
    def get_rate_set(self, branch_id: BranchId | None) -> CurrencyRateSet | None: ...


class ProductSource(Protocol):
    def list_products(
        self,
        branch_id: BranchId | None,
        owner_id: OwnerId | None,
        product_type: ProductType | None = None,
    ) -> list[Product]: ...


class OrderSource(Protocol):
    def get_order_items(self, order_id: OrderId) -> list[PersistedOrderItem] | None: ...


class OrderSubmitter(Protocol):
    def create(self, submission: OrderSubmission) -> OrderId: ...

    def update(self, order_id: OrderId, submission: OrderSubmission) -> OrderId: ...


class InvoiceSource(Protocol):
    def get_invoice(self, invoice_id: InvoiceId) -> InvoiceSummary | None: ...
