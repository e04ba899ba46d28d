from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from tpo.domain.common.roles import Role
from tpo.domain.invoice.entities import InvoiceStatus, InvoiceSummary


class InvoiceAction(str, Enum):
    VERIFY_PAYMENT = "verify_payment"
    UPLOAD_PAYMENT_PROOF = "upload_payment_proof"
    UNBLOCK = "unblock"
    HANDLE_OVERPAID = "handle_overpaid"


class BadgeCategory(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"
    ERROR = "error"
    DEFAULT = "default"


STATUS_LABELS = MappingProxyType(
    {
        InvoiceStatus.DRAFT: "Draft",
        InvoiceStatus.TENTATIVE: "Tagihan DP",
        InvoiceStatus.PARTIAL_PAID: "Pembayaran DP",
        InvoiceStatus.PAID: "Lunas",
        InvoiceStatus.PROCESSING: "Processing",
        InvoiceStatus.COMPLETED: "Completed",
        InvoiceStatus.OVERDUE: "Overdue",
        InvoiceStatus.CANCELED: "Dibatalkan",
        InvoiceStatus.REFUNDED: "Refund Dana",
        InvoiceStatus.ORDER_UPDATED: "Order Diupdate",
        InvoiceStatus.OVERPAID: "Kelebihan Bayar",
        InvoiceStatus.OVERPAID_TRANSFERRED: "Pindahan (Sumber)",
        InvoiceStatus.OVERPAID_RECEIVED: "Pindahan (Penerima)",
        InvoiceStatus.REFUND_CANCELED: "Refund Dibatalkan",
        InvoiceStatus.OVERPAID_REFUND_PENDING: "Sisa Pengembalian",
    }
)

STATUS_BADGES = MappingProxyType(
    {
        InvoiceStatus.DRAFT: BadgeCategory.DEFAULT,
        InvoiceStatus.TENTATIVE: BadgeCategory.DEFAULT,
        InvoiceStatus.PARTIAL_PAID: BadgeCategory.WARNING,
        InvoiceStatus.PAID: BadgeCategory.SUCCESS,
        InvoiceStatus.PROCESSING: BadgeCategory.INFO,
        InvoiceStatus.COMPLETED: BadgeCategory.SUCCESS,
        InvoiceStatus.OVERDUE: BadgeCategory.ERROR,
        InvoiceStatus.CANCELED: BadgeCategory.ERROR,
        InvoiceStatus.REFUNDED: BadgeCategory.DEFAULT,
        InvoiceStatus.ORDER_UPDATED: BadgeCategory.WARNING,
        InvoiceStatus.OVERPAID: BadgeCategory.WARNING,
        InvoiceStatus.OVERPAID_TRANSFERRED: BadgeCategory.INFO,
        InvoiceStatus.OVERPAID_RECEIVED: BadgeCategory.INFO,
        InvoiceStatus.REFUND_CANCELED: BadgeCategory.ERROR,
        InvoiceStatus.OVERPAID_REFUND_PENDING: BadgeCategory.WARNING,
    }
)

_PAYMENT_ACTIONS = frozenset({InvoiceAction.VERIFY_PAYMENT, InvoiceAction.UPLOAD_PAYMENT_PROOF})

# Actions an unblocked invoice offers in each status, before role filtering.
_STATUS_ACTIONS = MappingProxyType(
    {
        InvoiceStatus.TENTATIVE: _PAYMENT_ACTIONS,
        InvoiceStatus.PARTIAL_PAID: _PAYMENT_ACTIONS,
        InvoiceStatus.OVERDUE: _PAYMENT_ACTIONS,
        InvoiceStatus.ORDER_UPDATED: _PAYMENT_ACTIONS,
        InvoiceStatus.OVERPAID: frozenset({InvoiceAction.HANDLE_OVERPAID}),
    }
)

# A blocked invoice offers nothing but reactivation, whatever its status.
_BLOCKED_ACTIONS = frozenset({InvoiceAction.UNBLOCK})

_ACTION_ROLES = MappingProxyType(
    {
        InvoiceAction.VERIFY_PAYMENT: frozenset(
            {
                Role.ADMIN_PUSAT,
                Role.ADMIN_KOORDINATOR,
                Role.INVOICE_KOORDINATOR,
                Role.ROLE_INVOICE_SAUDI,
                Role.ROLE_INVOICE,
                Role.ROLE_ACCOUNTING,
                Role.SUPER_ADMIN,
            }
        ),
        InvoiceAction.UPLOAD_PAYMENT_PROOF: frozenset(
            {
                Role.OWNER,
                Role.INVOICE_KOORDINATOR,
                Role.ROLE_INVOICE_SAUDI,
                Role.SUPER_ADMIN,
            }
        ),
        InvoiceAction.UNBLOCK: frozenset(
            {
                Role.INVOICE_KOORDINATOR,
                Role.ADMIN_KOORDINATOR,
                Role.ADMIN_PUSAT,
                Role.SUPER_ADMIN,
            }
        ),
        InvoiceAction.HANDLE_OVERPAID: frozenset(
            {
                Role.INVOICE_KOORDINATOR,
                Role.ADMIN_KOORDINATOR,
                Role.SUPER_ADMIN,
            }
        ),
    }
)


@dataclass(frozen=True)
class InvoiceProjection:
    invoice_id: str | None
    status: str
    label: str
    category: BadgeCategory
    is_blocked: bool
    actions: frozenset[InvoiceAction]


def permitted_actions(invoice: InvoiceSummary, role: Role | str | None) -> frozenset[InvoiceAction]:
    parsed_role = Role.parse(role)
    if parsed_role is None or invoice.status is None:
        return frozenset()

    candidates = _BLOCKED_ACTIONS if invoice.is_blocked else _STATUS_ACTIONS.get(invoice.status, frozenset())
    return frozenset(action for action in candidates if parsed_role in _ACTION_ROLES[action])


def project_invoice(invoice: InvoiceSummary, role: Role | str | None) -> InvoiceProjection:
    if invoice.status is None:
        label = invoice.raw_status or "Unknown"
        category = BadgeCategory.DEFAULT
        status = invoice.raw_status
    else:
        label = STATUS_LABELS[invoice.status]
        category = STATUS_BADGES[invoice.status]
        status = invoice.status.value
    return InvoiceProjection(
        invoice_id=str(invoice.invoice_id) if invoice.invoice_id else None,
        status=status,
        label=label,
        category=category,
        is_blocked=invoice.is_blocked,
        actions=permitted_actions(invoice, role),
    )
