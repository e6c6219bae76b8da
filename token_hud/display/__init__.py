"""Display utilities for metrics output."""

from .colors import RSI_STATUS_HEX, Colors, rsi_color
from .formatters import format_compact_currency, format_currency, format_number
from .printers import format_summary_lines, print_summary

__all__ = [
    # Colors
    "Colors",
    "RSI_STATUS_HEX",
    "rsi_color",
    # Formatters
    "format_number",
    "format_currency",
    "format_compact_currency",
    # Printers
    "format_summary_lines",
    "print_summary",
]
