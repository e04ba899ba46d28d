from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Iterable

from tpo.domain.common.money import ZERO, Currency, CurrencyRateSet
from tpo.domain.order.entities import OrderLineRow, row_headcount, row_subtotal
from tpo.domain.pricing.triad import CurrencyTriad

# Wide enough that adding per-row SAR subtotals (each at the default 28 digits) is exact,
# which keeps the total independent of row order.
_SUMMATION_PRECISION = 80


@dataclass(frozen=True)
class OrderTotals:
    total_sar: Decimal
    total_idr: Decimal
    total_usd: Decimal
    total_headcount: int

    def triad(self) -> CurrencyTriad:
        return CurrencyTriad(idr=self.total_idr, sar=self.total_sar, usd=self.total_usd)


def row_subtotal_sar(row: OrderLineRow, rate_set: CurrencyRateSet) -> Decimal:
    subtotal = row_subtotal(row)
    if row.currency == Currency.SAR:
        return subtotal
    return subtotal / rate_set.normalized().sar_to_idr


def reconcile(rows: Iterable[OrderLineRow], rate_set: CurrencyRateSet) -> OrderTotals:
    rates = rate_set.normalized()
    rows = tuple(rows)
    per_row_sar = [row_subtotal_sar(row, rates) for row in rows]

    with localcontext() as ctx:
        ctx.prec = _SUMMATION_PRECISION
        total_sar = sum(per_row_sar, ZERO)
        total_idr = total_sar * rates.sar_to_idr
        total_usd = total_idr / rates.usd_to_idr

    return OrderTotals(
        total_sar=total_sar,
        total_idr=total_idr,
        total_usd=total_usd,
        total_headcount=sum(row_headcount(row) for row in rows),
    )
