"""Fixed-point money amounts.

Every amount handled by splitshare is a whole number of cents. Values coming
from the outside (form fields, database numerics, user text) are converted
exactly once, through ``Money.from_decimal`` or ``utils.parse.parse_amount``;
binary floats are refused at that boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from splitshare.config import get_settings

CENT = Decimal("0.01")
HUNDRED = Decimal(100)

DecimalLike = Union[Decimal, int, str]

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "C$",
    "AUD": "A$",
    "JPY": "¥",
    "INR": "₹",
    "BRL": "R$",
    "MXN": "MX$",
    "CHF": "CHF ",
}


def as_decimal(value: object) -> Decimal:
    if isinstance(value, Money):
        return value.to_decimal()
    if isinstance(value, (float, bool)):
        raise TypeError(f"{type(value).__name__} is not accepted as a money or quantity value")
    if not isinstance(value, (Decimal, int, str)):
        raise TypeError(f"unsupported value type: {type(value).__name__}")
    try:
        result = Decimal(value.strip() if isinstance(value, str) else value)
    except InvalidOperation as exc:
        raise ValueError(f"not a number: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return result


def round_cents(value: Decimal) -> int:
    """Round a value expressed in cents to a whole cent, halves away from zero."""
    try:
        return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        raise ValueError(f"amount out of range: {value}") from exc


@dataclass(frozen=True, slots=True, order=True)
class Money:
    cents: int

    def __post_init__(self) -> None:
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise TypeError("Money must be built from an integer number of cents")

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    @classmethod
    def from_cents(cls, cents: int) -> Money:
        return cls(cents)

    @classmethod
    def from_decimal(cls, value: Union[DecimalLike, Money]) -> Money:
        if isinstance(value, Money):
            return value
        return cls(round_cents(as_decimal(value) * HUNDRED))

    def to_decimal(self) -> Decimal:
        return Decimal(self.cents).scaleb(-2)

    def __add__(self, other: object) -> Money:
        if isinstance(other, Money):
            return Money(self.cents + other.cents)
        return NotImplemented

    def __radd__(self, other: object) -> Money:
        # sum() starts from the int 0
        if isinstance(other, int) and not isinstance(other, bool) and other == 0:
            return self
        return NotImplemented

    def __sub__(self, other: object) -> Money:
        if isinstance(other, Money):
            return Money(self.cents - other.cents)
        return NotImplemented

    def __neg__(self) -> Money:
        return Money(-self.cents)

    def __abs__(self) -> Money:
        return Money(abs(self.cents))

    def __bool__(self) -> bool:
        return self.cents != 0

    def __str__(self) -> str:
        return str(self.to_decimal())

    def __repr__(self) -> str:
        return f"Money('{self}')"


def percent_of(part: Money, whole: Money) -> Decimal:
    """``part / whole * 100`` rounded to two places, for display."""
    if not whole:
        return Decimal("0.00")
    return (Decimal(part.cents) * HUNDRED / Decimal(whole.cents)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Money, currency: Optional[str] = None) -> str:
    if currency is None:
        currency = get_settings().default_currency
    code = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    sign = "-" if amount.cents < 0 else ""
    return f"{sign}{symbol}{abs(amount).to_decimal():,.2f}"
