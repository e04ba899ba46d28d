from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from tpo.domain.common.ids import InvoiceId
from tpo.domain.common.money import ZERO


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    TENTATIVE = "tentative"
    PARTIAL_PAID = "partial_paid"
    PAID = "paid"
    PROCESSING = "processing"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    CANCELED = "canceled"
    REFUNDED = "refunded"
    ORDER_UPDATED = "order_updated"
    OVERPAID = "overpaid"
    OVERPAID_TRANSFERRED = "overpaid_transferred"
    OVERPAID_RECEIVED = "overpaid_received"
    REFUND_CANCELED = "refund_canceled"
    OVERPAID_REFUND_PENDING = "overpaid_refund_pending"

    @classmethod
    def parse(cls, value: object) -> InvoiceStatus | None:
        if isinstance(value, InvoiceStatus):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        if normalized == "cancelled":
            return cls.CANCELED
        try:
            return cls(normalized)
        except ValueError:
            return None


@dataclass(frozen=True)
class InvoiceSummary:
    """Read-only view of an invoice owned by the invoicing service."""

    invoice_id: InvoiceId | None
    status: InvoiceStatus | None
    raw_status: str = ""
    is_blocked: bool = False
    total_amount: Decimal = ZERO
    paid_amount: Decimal = ZERO
    remaining_amount: Decimal = ZERO
