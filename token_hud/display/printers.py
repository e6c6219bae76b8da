"""Text rendering of the metrics summary."""

from typing import List

from ..indicators.rsi_engine import RSIStatus
from .colors import RSI_STATUS_ANSI, Colors

SUMMARY_ROWS = (
    ("Price", "price"),
    ("Market Cap", "market_cap"),
    ("Volume (1m)", "volume_1m"),
    ("Volume (5m)", "volume_5m"),
    ("Session ATH", "session_ath_market_cap"),
    ("Pulse MC", "pulse_market_cap"),
    ("Pulse Volume", "pulse_volume"),
    ("Holders", "holders"),
    ("Liquidity", "liquidity"),
    ("Market Vol (5m)", "lighthouse_volume_5m"),
    ("Chart ATH", "chart_ath_market_cap"),
)


def format_summary_lines(summary, color: bool = False) -> List[str]:
    """
    Render a MetricsSummary as aligned "Label: value" lines.

    Args:
        summary: MetricsSummary from MetricsStore.formatted_summary()
        color: Wrap labels and the RSI status in ANSI colors

    Returns:
        One string per line, RSI last
    """
    width = max(len(label) for label, _ in SUMMARY_ROWS + (("RSI", ""),))
    lines = []
    for label, attr in SUMMARY_ROWS:
        value = getattr(summary, attr)
        if color:
            lines.append(f"{Colors.BOLD}{label + ':':<{width + 1}}{Colors.RESET} {value}")
        else:
            lines.append(f"{label + ':':<{width + 1}} {value}")

    status: RSIStatus = summary.rsi_status
    status_text = "Calculating..." if status is RSIStatus.CALCULATING else status.value
    rsi_text = f"{summary.rsi} ({status_text})"
    if color:
        rsi_text = f"{RSI_STATUS_ANSI[status]}{rsi_text}{Colors.RESET}"
        lines.append(f"{Colors.BOLD}{'RSI:':<{width + 1}}{Colors.RESET} {rsi_text}")
    else:
        lines.append(f"{'RSI:':<{width + 1}} {rsi_text}")
    return lines


def print_summary(summary, color: bool = True) -> None:
    """Print the summary block to stdout."""
    print()
    print(f"{Colors.BOLD}{Colors.CYAN}Token Stats{Colors.RESET}" if color else "Token Stats")
    for line in format_summary_lines(summary, color=color):
        print(f"  {line}")
    print()
