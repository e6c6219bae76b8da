"""Streaming indicators."""

from .rsi_engine import PricePoint, RSIEngine, RSIPoint, RSIStatus, classify

__all__ = [
    "PricePoint",
    "RSIEngine",
    "RSIPoint",
    "RSIStatus",
    "classify",
]
