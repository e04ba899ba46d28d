from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN_PUSAT = "admin_pusat"
    ADMIN_KOORDINATOR = "admin_koordinator"
    INVOICE_KOORDINATOR = "invoice_koordinator"
    TIKET_KOORDINATOR = "tiket_koordinator"
    VISA_KOORDINATOR = "visa_koordinator"
    ROLE_HOTEL = "role_hotel"
    ROLE_BUS = "role_bus"
    ROLE_INVOICE_SAUDI = "role_invoice_saudi"
    ROLE_ACCOUNTING = "role_accounting"
    OWNER = "owner"
    # legacy roles still present in older accounts
    ADMIN_CABANG = "admin_cabang"
    ROLE_INVOICE = "role_invoice"

    @classmethod
    def parse(cls, value: object) -> Role | None:
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


PRICE_EDITING_ROLES = frozenset(
    {
        Role.INVOICE_KOORDINATOR,
        Role.ROLE_INVOICE_SAUDI,
        Role.SUPER_ADMIN,
        Role.ADMIN_PUSAT,
        Role.ADMIN_KOORDINATOR,
    }
)

# Staff who compose an order on behalf of an owner and inherit that owner's branch.
OWNER_PICKING_ROLES = frozenset({Role.INVOICE_KOORDINATOR, Role.ROLE_INVOICE_SAUDI})


def can_edit_prices(role: Role | None) -> bool:
    return role in PRICE_EDITING_ROLES
