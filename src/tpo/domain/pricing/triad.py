from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from tpo.domain.common.money import (
    ZERO,
    Currency,
    CurrencyRateSet,
    coerce_amount,
    format_amount,
    non_negative_amount,
    round_amount,
)


@dataclass(frozen=True)
class CurrencyTriad:
    idr: Decimal
    sar: Decimal
    usd: Decimal

    def __post_init__(self) -> None:
        if self.idr < 0 or self.sar < 0 or self.usd < 0:
            raise ValueError("triad amounts must be >= 0")

    def amount(self, currency: Currency) -> Decimal:
        if currency == Currency.SAR:
            return self.sar
        if currency == Currency.USD:
            return self.usd
        return self.idr

    def rounded(self) -> CurrencyTriad:
        return CurrencyTriad(
            idr=round_amount(Currency.IDR, self.idr),
            sar=round_amount(Currency.SAR, self.sar),
            usd=round_amount(Currency.USD, self.usd),
        )

    def formatted(self) -> dict[str, str]:
        return {currency.value: format_amount(currency, self.amount(currency)) for currency in Currency}


ZERO_TRIAD = CurrencyTriad(idr=ZERO, sar=ZERO, usd=ZERO)


def to_idr(currency: Currency, value: object, rate_set: CurrencyRateSet | None = None) -> Decimal:
    rates = (rate_set or CurrencyRateSet()).normalized()
    amount = coerce_amount(value)
    if currency == Currency.IDR:
        return amount
    return amount * rates.rate_to_idr(currency)


def from_idr(currency: Currency, idr: object, rate_set: CurrencyRateSet | None = None) -> Decimal:
    rates = (rate_set or CurrencyRateSet()).normalized()
    amount = non_negative_amount(idr)
    if currency == Currency.IDR:
        return amount
    return amount / rates.rate_to_idr(currency)


def convert(
    amount: object,
    source: Currency,
    target: Currency,
    rate_set: CurrencyRateSet | None = None,
) -> Decimal:
    value = coerce_amount(amount)
    if source == target:
        return value
    return from_idr(target, to_idr(source, value, rate_set), rate_set)


def resolve_triad(
    source_currency: Currency | str,
    source_value: object,
    rate_set: CurrencyRateSet | None = None,
) -> CurrencyTriad:
    """Expand one authoritative amount into its IDR/SAR/USD triad.

    The source member is the coerced input itself, so ``resolve_triad(c, v)[c] == v``.
    Unknown source currencies are read as IDR. Never raises.
    """
    rates = (rate_set or CurrencyRateSet()).normalized()
    currency = Currency.parse(source_currency) or Currency.IDR
    return _expand(currency, coerce_amount(source_value), rates)


def idr_triad(idr: object, rate_set: CurrencyRateSet | None = None) -> CurrencyTriad:
    """Triad of an IDR amount computed from stored prices; unlike resolve_triad it is not range checked."""
    rates = (rate_set or CurrencyRateSet()).normalized()
    return _expand(Currency.IDR, non_negative_amount(idr), rates)


def _expand(currency: Currency, value: Decimal, rates: CurrencyRateSet) -> CurrencyTriad:
    idr = value if currency == Currency.IDR else value * rates.rate_to_idr(currency)
    return CurrencyTriad(
        idr=value if currency == Currency.IDR else idr,
        sar=value if currency == Currency.SAR else idr / rates.sar_to_idr,
        usd=value if currency == Currency.USD else idr / rates.usd_to_idr,
    )
