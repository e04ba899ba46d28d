from __future__ import annotations

from typing import NewType
from uuid import uuid4

CompositionId = NewType("CompositionId", str)
BranchId = NewType("BranchId", str)
OwnerId = NewType("OwnerId", str)
OrderId = NewType("OrderId", str)
ProductId = NewType("ProductId", str)
RowId = NewType("RowId", str)
SubLineId = NewType("SubLineId", str)
InvoiceId = NewType("InvoiceId", str)


def new_composition_id() -> CompositionId:
    return CompositionId(f"cmp_{uuid4().hex[:12]}")


def new_row_id() -> RowId:
    return RowId(f"row_{uuid4().hex[:12]}")


def new_sub_line_id() -> SubLineId:
    return SubLineId(f"rl_{uuid4().hex[:12]}")
