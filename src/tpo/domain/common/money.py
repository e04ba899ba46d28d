from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum

ZERO = Decimal("0")

DEFAULT_SAR_TO_IDR = Decimal("4200")
DEFAULT_USD_TO_IDR = Decimal("15500")

_SMALLEST_UNIT = {
    "IDR": Decimal("1"),
    "SAR": Decimal("0.01"),
    "USD": Decimal("0.01"),
}


class Currency(str, Enum):
    IDR = "IDR"
    SAR = "SAR"
    USD = "USD"

    @classmethod
    def parse(cls, value: object) -> Currency | None:
        if isinstance(value, Currency):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None

    @property
    def smallest_unit(self) -> Decimal:
        return _SMALLEST_UNIT[self.value]


# The platform persists every order amount in IDR; SAR is used to sum mixed-currency rows.
CANONICAL_CURRENCY = Currency.IDR
REFERENCE_CURRENCY = Currency.SAR

# Input outside [MIN_INPUT_AMOUNT, MAX_INPUT_AMOUNT) reads as zero.
MIN_INPUT_AMOUNT = Decimal("1e-15")
MAX_INPUT_AMOUNT = Decimal("1e15")

_ROUNDING_PRECISION = 120


def _parse_amount(value: object) -> Decimal:
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not amount.is_finite() or amount <= 0:
        return ZERO
    return amount


def coerce_amount(value: object) -> Decimal:
    """Turn user or wire input into a non-negative Decimal.

    Empty, non-numeric, non-finite and negative input becomes zero, and so does
    anything outside ``[MIN_INPUT_AMOUNT, MAX_INPUT_AMOUNT)``.
    """
    amount = _parse_amount(value)
    if amount < MIN_INPUT_AMOUNT or amount >= MAX_INPUT_AMOUNT:
        return ZERO
    return amount


def non_negative_amount(value: object) -> Decimal:
    """Like coerce_amount but without the range check, for computed amounts."""
    return _parse_amount(value)


def coerce_quantity(value: object) -> int:
    amount = coerce_amount(value)
    return int(amount)


def _positive_or(value: object, default: Decimal) -> Decimal:
    amount = coerce_amount(value)
    if amount <= 0:
        return default
    return amount


@dataclass(frozen=True)
class CurrencyRateSet:
    """IDR value of one SAR and of one USD."""

    sar_to_idr: Decimal = DEFAULT_SAR_TO_IDR
    usd_to_idr: Decimal = DEFAULT_USD_TO_IDR

    @classmethod
    def of(cls, sar_to_idr: object = None, usd_to_idr: object = None) -> CurrencyRateSet:
        return cls(
            sar_to_idr=_positive_or(sar_to_idr, DEFAULT_SAR_TO_IDR),
            usd_to_idr=_positive_or(usd_to_idr, DEFAULT_USD_TO_IDR),
        )

    def normalized(self) -> CurrencyRateSet:
        return CurrencyRateSet.of(self.sar_to_idr, self.usd_to_idr)

    def rate_to_idr(self, currency: Currency) -> Decimal:
        if currency == Currency.SAR:
            return self.sar_to_idr
        if currency == Currency.USD:
            return self.usd_to_idr
        return Decimal("1")

    @property
    def is_default(self) -> bool:
        return self.sar_to_idr == DEFAULT_SAR_TO_IDR and self.usd_to_idr == DEFAULT_USD_TO_IDR


def round_amount(currency: Currency, value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = _ROUNDING_PRECISION
        return value.quantize(currency.smallest_unit, rounding=ROUND_HALF_UP)


def format_amount(currency: Currency, value: object) -> str:
    amount = round_amount(currency, non_negative_amount(value))
    if currency == Currency.IDR:
        grouped = f"{int(amount):,}".replace(",", ".")
        return f"Rp {grouped}"
    if currency == Currency.SAR:
        return f"{amount:,.2f} SAR"
    return f"${amount:,.2f}"
