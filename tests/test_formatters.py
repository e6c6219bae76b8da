"""Tests for number formatting, RSI colors and summary rendering."""

import math

import pytest

from token_hud.display import (
    RSI_STATUS_HEX,
    format_compact_currency,
    format_currency,
    format_number,
    format_summary_lines,
    rsi_color,
)
from token_hud.indicators.rsi_engine import RSIStatus


class TestFormatNumber:
    """Tests for the general number formatter"""

    @pytest.mark.parametrize("value", [None, "abc", math.nan, math.inf, True, object()])
    def test_non_numbers_render_placeholder(self, value):
        """Test that non-numeric input renders the placeholder"""
        assert format_number(value) == "---"

    def test_custom_placeholder(self):
        """Test a caller-supplied placeholder"""
        assert format_number(None, placeholder="n/a") == "n/a"

    def test_decimal_grouping(self):
        """Test thousands grouping with two fraction digits"""
        assert format_number(1234.5) == "1,234.50"
        assert format_number(0) == "0.00"

    def test_numeric_string(self):
        """Test that numeric strings are formatted"""
        assert format_number("12.5") == "12.50"

    def test_fraction_digit_range(self):
        """Test min and max fraction digits"""
        assert format_number(0.00123, min_fraction_digits=2, max_fraction_digits=10) == "0.00123"
        assert format_number(5, min_fraction_digits=2, max_fraction_digits=10) == "5.00"
        assert format_number(2.5, min_fraction_digits=0, max_fraction_digits=0) == "2"

    def test_negative(self):
        """Test the sign on negatives and on values rounding to zero"""
        assert format_number(-1234.5) == "-1,234.50"
        assert format_currency(-5) == "-$5"
        assert format_number(-0.001) == "0.00"

    def test_currencies(self):
        """Test known currency symbols and the code fallback"""
        assert format_number(3, style="currency", currency="EUR") == "€3.00"
        assert format_number(3, style="currency", currency="GBP") == "£3.00"
        assert format_number(3, style="currency", currency="JPY") == "JPY 3.00"


class TestCurrencyHelpers:
    """Tests for whole and compact currency helpers"""

    def test_whole_currency(self):
        """Test whole-dollar rounding with grouping"""
        assert format_currency(2_000_000) == "$2,000,000"
        assert format_currency(1_999_999.6) == "$2,000,000"

    @pytest.mark.parametrize(
        "value,expected",
        [
            (0.5, "$0.5"),
            (125.5, "$125.5"),
            (999.994, "$999.99"),
            (999.996, "$1K"),
            (1500, "$1.5K"),
            (1_250_000, "$1.25M"),
            (2.5e9, "$2.5B"),
            (1e12, "$1T"),
            (999_999, "$1M"),
        ],
    )
    def test_compact(self, value, expected):
        """Test compact suffixes including rounding into the next unit"""
        assert format_compact_currency(value) == expected


class TestColors:
    """Tests for RSI status colors"""

    def test_status_colors(self):
        """Test the hex color for every status"""
        assert rsi_color(RSIStatus.OVERSOLD) == "#00ff00"
        assert rsi_color(RSIStatus.OVERBOUGHT) == "#ff0000"
        assert rsi_color(RSIStatus.NEUTRAL) == "#ffff00"
        assert rsi_color(RSIStatus.CALCULATING) == "#888888"
        assert set(RSI_STATUS_HEX) == set(RSIStatus)


class TestSummaryLines:
    """Tests for rendered summary lines"""

    def test_plain_lines(self, store):
        """Test plain lines for an empty store"""
        lines = format_summary_lines(store.formatted_summary())

        assert lines[0].startswith("Price:")
        assert lines[0].endswith("---")
        assert lines[-1].startswith("RSI:")
        assert lines[-1].endswith("--- (Calculating...)")
        assert all("\033[" not in line for line in lines)

    def test_colored_lines(self, store):
        """Test that color output tints the RSI line"""
        lines = format_summary_lines(store.formatted_summary(), color=True)
        assert "\033[90m" in lines[-1]
