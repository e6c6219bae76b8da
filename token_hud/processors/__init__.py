"""Per-variant event processors mutating the metrics store."""

from .chart import ChartAggregator
from .lighthouse import LighthouseProcessor
from .pulse import PulseProcessor
from .trade import TradeProcessor

__all__ = [
    "ChartAggregator",
    "LighthouseProcessor",
    "PulseProcessor",
    "TradeProcessor",
]
