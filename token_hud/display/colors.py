"""Color codes for terminal output and RSI status styling."""

from ..indicators.rsi_engine import RSIStatus


class Colors:
    """ANSI escape codes for terminal coloring."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GREY = "\033[90m"


# Hex colors for HTML overlays
RSI_STATUS_HEX = {
    RSIStatus.OVERSOLD: "#00ff00",
    RSIStatus.OVERBOUGHT: "#ff0000",
    RSIStatus.NEUTRAL: "#ffff00",
    RSIStatus.CALCULATING: "#888888",
}

RSI_STATUS_ANSI = {
    RSIStatus.OVERSOLD: Colors.GREEN,
    RSIStatus.OVERBOUGHT: Colors.RED,
    RSIStatus.NEUTRAL: Colors.YELLOW,
    RSIStatus.CALCULATING: Colors.GREY,
}


def rsi_color(status: RSIStatus) -> str:
    """Hex color for an RSI status."""
    return RSI_STATUS_HEX[status]
