from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from tpo.domain.common.ids import InvoiceId
from tpo.domain.common.roles import Role
from tpo.domain.invoice.entities import InvoiceStatus, InvoiceSummary
from tpo.domain.invoice.projection import (
    BadgeCategory,
    InvoiceAction,
    permitted_actions,
    project_invoice,
)


def _invoice(status: str, is_blocked: bool = False) -> InvoiceSummary:
    return InvoiceSummary(
        invoice_id=InvoiceId("inv_001"),
        status=InvoiceStatus.parse(status),
        raw_status=status,
        is_blocked=is_blocked,
    )


@pytest.mark.parametrize(
    ("status", "role", "expected"),
    [
        ("tentative", Role.INVOICE_KOORDINATOR, {InvoiceAction.VERIFY_PAYMENT, InvoiceAction.UPLOAD_PAYMENT_PROOF}),
        ("tentative", Role.ADMIN_PUSAT, {InvoiceAction.VERIFY_PAYMENT}),
        ("partial_paid", Role.OWNER, {InvoiceAction.UPLOAD_PAYMENT_PROOF}),
        ("overdue", Role.ROLE_ACCOUNTING, {InvoiceAction.VERIFY_PAYMENT}),
        ("paid", Role.SUPER_ADMIN, set()),
        ("canceled", Role.SUPER_ADMIN, set()),
        ("overpaid", Role.INVOICE_KOORDINATOR, {InvoiceAction.HANDLE_OVERPAID}),
        ("overpaid", Role.OWNER, set()),
        ("tentative", Role.ROLE_HOTEL, set()),
    ],
)
def test_permitted_actions_by_status_and_role(status: str, role: Role, expected: set[InvoiceAction]) -> None:
    assert permitted_actions(_invoice(status), role) == frozenset(expected)


def test_blocked_invoice_only_offers_unblock_to_coordinators() -> None:
    blocked = _invoice("tentative", is_blocked=True)

    assert permitted_actions(blocked, Role.ADMIN_PUSAT) == frozenset({InvoiceAction.UNBLOCK})
    assert permitted_actions(blocked, Role.OWNER) == frozenset()
    assert permitted_actions(_invoice("paid", is_blocked=True), "super_admin") == frozenset({InvoiceAction.UNBLOCK})


def test_unknown_role_gets_no_actions() -> None:
    assert permitted_actions(_invoice("tentative"), "guest") == frozenset()
    assert permitted_actions(_invoice("tentative"), None) == frozenset()


def test_projection_carries_label_and_badge() -> None:
    projection = project_invoice(_invoice("partial_paid"), Role.OWNER)

    assert projection.invoice_id == "inv_001"
    assert projection.status == "partial_paid"
    assert projection.label == "Pembayaran DP"
    assert projection.category == BadgeCategory.WARNING


def test_british_spelling_of_cancelled_is_accepted() -> None:
    projection = project_invoice(_invoice("cancelled"), Role.SUPER_ADMIN)

    assert projection.status == InvoiceStatus.CANCELED.value
    assert projection.label == "Dibatalkan"
    assert projection.category == BadgeCategory.ERROR


def test_unknown_status_projects_as_default_without_actions() -> None:
    projection = project_invoice(_invoice("archived"), Role.SUPER_ADMIN)

    assert projection.status == "archived"
    assert projection.label == "archived"
    assert projection.category == BadgeCategory.DEFAULT
    assert projection.actions == frozenset()
