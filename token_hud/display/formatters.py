"""Number formatting utilities for metrics display."""

import math
from typing import Any, Optional

from ..config import PLACEHOLDER

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}

COMPACT_UNITS = (
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
    (1.0, ""),
)


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def _fixed(value: float, min_fraction_digits: int, max_fraction_digits: int) -> str:
    """Grouped fixed-point text with trailing zeros trimmed down to the minimum."""
    text = f"{value:,.{max_fraction_digits}f}"
    if max_fraction_digits <= min_fraction_digits or "." not in text:
        return text
    whole, frac = text.split(".")
    frac = frac.rstrip("0")
    if len(frac) < min_fraction_digits:
        frac = frac.ljust(min_fraction_digits, "0")
    return f"{whole}.{frac}" if frac else whole


def _compact(value: float, min_fraction_digits: int, max_fraction_digits: int) -> str:
    # Largest unit not above the value; values below 1 use the unsuffixed tier
    i = next(
        (i for i, (scale, _) in enumerate(COMPACT_UNITS) if value >= scale),
        len(COMPACT_UNITS) - 1,
    )
    scale, suffix = COMPACT_UNITS[i]
    scaled = round(value / scale, max_fraction_digits)
    # Rounding can carry into the next unit (999.999K -> 1M, 999.996 -> 1K)
    if scaled >= 1000 and i > 0:
        scale, suffix = COMPACT_UNITS[i - 1]
        scaled = value / scale
    return _fixed(scaled, min_fraction_digits, max_fraction_digits) + suffix


def format_number(
    value: Any,
    style: str = "decimal",
    currency: str = "USD",
    min_fraction_digits: int = 2,
    max_fraction_digits: int = 2,
    compact: bool = False,
    placeholder: str = PLACEHOLDER,
) -> str:
    """
    Format a number for display.

    Args:
        value: Number or numeric string
        style: "decimal" or "currency"
        currency: ISO currency code used with the currency style
        min_fraction_digits: Minimum digits after the decimal point
        max_fraction_digits: Maximum digits after the decimal point
        compact: Use K/M/B/T suffixes
        placeholder: Returned for anything that is not a finite number

    Returns:
        Formatted string, e.g. "$1,234.50" or "1.2M"
    """
    number = _to_float(value)
    if number is None:
        return placeholder

    min_fraction_digits = min(min_fraction_digits, max_fraction_digits)
    magnitude = abs(number)
    if compact:
        body = _compact(magnitude, min_fraction_digits, max_fraction_digits)
    else:
        body = _fixed(magnitude, min_fraction_digits, max_fraction_digits)

    negative = number < 0 and any(c in "123456789" for c in body)
    if style == "currency":
        body = CURRENCY_SYMBOLS.get(currency, f"{currency} ") + body

    return f"-{body}" if negative else body


def format_currency(
    value: Any,
    min_fraction_digits: int = 0,
    max_fraction_digits: int = 0,
    placeholder: str = PLACEHOLDER,
) -> str:
    """Currency with grouping, e.g. "$2,000,000"."""
    return format_number(
        value,
        style="currency",
        min_fraction_digits=min_fraction_digits,
        max_fraction_digits=max_fraction_digits,
        placeholder=placeholder,
    )


def format_compact_currency(value: Any, placeholder: str = PLACEHOLDER) -> str:
    """Compact currency, e.g. "$1.25M"."""
    return format_number(
        value,
        style="currency",
        min_fraction_digits=0,
        max_fraction_digits=2,
        compact=True,
        placeholder=placeholder,
    )
