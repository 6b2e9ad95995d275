"""Amount detection and parsing for statement text.

Amounts in statement text come in several locale shapes: ``1,234.56``,
``1 234,56``, ``150.50``, ``3000.00``.  All of them end in a two-digit
decimal part; that is what distinguishes an amount from card numbers,
reference codes, and years.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

# Grouped thousands ("1,234" / "1 234", a space or no-break space but never a
# tab, which separates columns) or a plain digit run, then a two-digit
# decimal part.  The lookarounds keep the match from starting or
# ending in the middle of a longer number (e.g. a dotted date 02.01.2024).
AMOUNT_RE = re.compile(r"(?<![\d.,])(?:\d{1,3}(?:[, \u00a0]\d{3})+|\d+)[,.]\d{2}(?![.,]?\d)")

_CENT = Decimal("0.01")


def find_amounts(text: str) -> list[str]:
    """Return every amount-shaped substring of *text*, in order."""
    return AMOUNT_RE.findall(text)


def has_amount(text: str) -> bool:
    return AMOUNT_RE.search(text) is not None


def last_amount(text: str) -> str | None:
    """Return the last amount-shaped substring of *text*, or ``None``.

    On a statement line the trailing amount is the transaction amount;
    any earlier ones are treated as running balances.  Two known limits:
    a layout that prints the running balance after the amount yields the
    balance, and a 1-3 digit token one space before a comma-less amount
    reads as a thousands group (``"GAB 123 500.00"`` gives
    ``"123 500.00"``).
    """
    amounts = find_amounts(text)
    return amounts[-1] if amounts else None


def parse_amount(text: str) -> Decimal:
    """Convert locale-formatted numeric text to a non-negative Decimal.

    Whitespace is removed, commas followed by exactly three digits are
    treated as thousands separators, and a trailing ``,NN`` is treated as a
    decimal comma.  Text that still does not parse yields ``Decimal("0.00")``
    rather than an error.

    Examples:
        >>> parse_amount("1,234.56")
        Decimal('1234.56')
        >>> parse_amount("1 234,56")
        Decimal('1234.56')
        >>> parse_amount("n/a")
        Decimal('0.00')
    """
    normalized = re.sub(r"\s", "", text)
    normalized = re.sub(r",(\d{3})", r"\1", normalized)
    normalized = re.sub(r",(\d{2})$", r".\1", normalized)
    try:
        value = Decimal(normalized)
    except InvalidOperation:
        return Decimal("0.00")
    if not value.is_finite():
        return Decimal("0.00")
    return abs(value).quantize(_CENT, rounding=ROUND_HALF_UP)
