from __future__ import annotations

import re
from decimal import Decimal

from splitshare.money import CURRENCY_SYMBOLS, Money


# 12 | 12.5 | 12,50 | 1 234.56 | 1,234.56 | -3.10
AMOUNT_RE = re.compile(r"^(?P<sign>-)?(?P<int>\d{1,3}(?:[ ,]\d{3})+|\d+)(?:[.,](?P<frac>\d{1,2}))?$")
CURRENCY_CODE_RE = re.compile(r"^[A-Za-z]{3}$")


def _strip_symbol(text: str) -> str:
    for code, symbol in sorted(CURRENCY_SYMBOLS.items(), key=lambda item: -len(item[1])):
        for marker in (symbol.strip(), code):
            if text.upper().startswith(marker.upper()):
                return text[len(marker):].strip()
    return text


def parse_amount(text: str) -> Money:
    """
    Parse a user-entered amount into Money.

    Accepted forms:
    - 12, 12.5, 12.50
    - 12,50 (comma as decimal separator)
    - 1 234.56, 1,234.56 (thousands separators)
    - an optional leading currency symbol or code: $12, EUR 12.50
    """
    cleaned = _strip_symbol(text.strip())
    if cleaned.startswith("-"):
        cleaned = "-" + _strip_symbol(cleaned[1:].strip())

    match = AMOUNT_RE.match(cleaned)
    if not match:
        raise ValueError(f"Invalid amount: {text!r}")

    integer_part = re.sub(r"[ ,]", "", match.group("int"))
    fraction = (match.group("frac") or "").ljust(2, "0")
    value = Decimal(f"{integer_part}.{fraction}")
    if match.group("sign"):
        value = -value
    return Money.from_decimal(value)


def parse_amount_with_currency(text: str, default_currency: str) -> tuple[Money, str]:
    parts = text.strip().split()
    if len(parts) > 1 and CURRENCY_CODE_RE.match(parts[-1]):
        return parse_amount(" ".join(parts[:-1])), parts[-1].upper()
    return parse_amount(text), default_currency.upper()
