"""Fixed-point currency helpers. Every balance in the package is integer cents."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union
import re

from .exceptions import ValidationError

CENT = Decimal("0.01")

THOUSANDS_GROUPED = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d*)?$")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "$",
    "AUD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}


def to_cents(value: Union[Decimal, str, int, float]) -> int:
    """
    Convert a major-unit amount ("12.34", Decimal("12.34")) to integer cents.

    Floats are routed through ``str`` so 0.1 becomes 10 cents rather than
    9.999... cents. Half-cents round away from zero.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Not an amount: {value!r}")
    if isinstance(value, int):
        return value * 100

    text = str(value).strip().replace("$", "")
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]

    # Commas are thousands separators only; "12,34" is not 1234.00
    if "," in text:
        if not THOUSANDS_GROUPED.match(text):
            raise ValidationError(f"Ambiguous separators in amount: {value!r}")
        text = text.replace(",", "")

    try:
        amount = Decimal(text).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValidationError(f"Not an amount: {value!r}") from e
    if not amount.is_finite():
        raise ValidationError(f"Not an amount: {value!r}")

    cents = int(amount * 100)
    return -cents if negative else cents


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a two-place Decimal."""
    return (Decimal(cents) / 100).quantize(CENT)


def format_cents(cents: int, currency: str = "USD") -> str:
    """Render cents for display, e.g. ``-1234`` -> ``-$12.34``."""
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), "")
    sign = "-" if cents < 0 else ""
    text = f"{sign}{symbol}{from_cents(abs(cents)):,.2f}"
    if not symbol:
        text = f"{text} {currency.upper()}"
    return text
