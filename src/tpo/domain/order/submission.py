from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tpo.domain.catalog.entities import ProductType
from tpo.domain.common.ids import BranchId, OrderId, OwnerId, ProductId
from tpo.domain.common.money import CANONICAL_CURRENCY
from tpo.domain.common.roles import OWNER_PICKING_ROLES, Role
from tpo.domain.order.composition import OrderComposition
from tpo.domain.order.entities import HotelRow, OrderLineRow, is_submittable
from tpo.domain.pricing.rooms import RoomType
from tpo.domain.pricing.triad import convert


class NoSubmittableRowsError(Exception):
    pass


class BranchRequiredError(Exception):
    pass


class OwnerRequiredError(Exception):
    pass


class OwnerWithoutBranchError(Exception):
    pass


@dataclass(frozen=True)
class SubmissionItem:
    product_id: ProductId
    row_type: ProductType
    quantity: int
    unit_price_idr: Decimal
    room_type: RoomType | None = None
    with_meal: bool | None = None

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")
        if self.unit_price_idr < 0:
            raise ValueError("unit_price_idr must be >= 0")

    @property
    def product_ref_type(self) -> str:
        return "package" if self.row_type == ProductType.PACKAGE else "product"


@dataclass(frozen=True)
class OrderSubmission:
    items: tuple[SubmissionItem, ...]
    branch_id: BranchId | None = None
    owner_id: OwnerId | None = None
    order_id: OrderId | None = None

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("submission must contain at least one item")


def _items_for_row(row: OrderLineRow, composition: OrderComposition) -> list[SubmissionItem]:
    def in_idr(price: Decimal) -> Decimal:
        return convert(price, row.currency, CANONICAL_CURRENCY, composition.rate_set)

    product_id = ProductId(str(row.product_id))
    if isinstance(row, HotelRow) and any(line.quantity > 0 for line in row.sub_lines):
        return [
            SubmissionItem(
                product_id=product_id,
                row_type=ProductType.HOTEL,
                quantity=line.quantity,
                unit_price_idr=in_idr(line.unit_price),
                room_type=line.room_type,
                with_meal=line.with_meal,
            )
            for line in row.sub_lines
            if line.quantity > 0
        ]
    if isinstance(row, HotelRow):
        return [
            SubmissionItem(
                product_id=product_id,
                row_type=ProductType.HOTEL,
                quantity=max(1, row.quantity),
                unit_price_idr=in_idr(row.unit_price),
                room_type=row.room_type,
            )
        ]
    return [
        SubmissionItem(
            product_id=product_id,
            row_type=row.row_type,
            quantity=max(1, row.quantity),
            unit_price_idr=in_idr(row.unit_price),
        )
    ]


def _check_selection(composition: OrderComposition, role: Role | None) -> None:
    if composition.is_edit or role == Role.OWNER:
        return
    if role in OWNER_PICKING_ROLES:
        if not composition.owner_id:
            raise OwnerRequiredError("select an owner for this order")
        if not composition.branch_id:
            raise OwnerWithoutBranchError(f"owner {composition.owner_id} has no branch assigned")
        return
    if not composition.branch_id:
        raise BranchRequiredError("select a branch for this order")


def build_submission(composition: OrderComposition, role: Role | None) -> OrderSubmission:
    """Validate a composition and express every unit price in IDR for persistence."""
    rows = [row for row in composition.rows if is_submittable(row)]
    if not rows:
        raise NoSubmittableRowsError("at least one item needs a product and a quantity above zero")
    _check_selection(composition, role)

    items: list[SubmissionItem] = []
    for row in rows:
        items.extend(_items_for_row(row, composition))

    include_branch = not composition.is_edit and role != Role.OWNER and role not in OWNER_PICKING_ROLES
    include_owner = not composition.is_edit and role != Role.OWNER
    return OrderSubmission(
        items=tuple(items),
        branch_id=composition.branch_id if include_branch else None,
        owner_id=composition.owner_id if include_owner else None,
        order_id=composition.order_id,
    )
