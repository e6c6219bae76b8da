"""
Token HUD - live market metrics and RSI for a single token.

Consumes trades, pulse snapshots, broad-market (lighthouse) aggregates and
historical chart bars, and derives price, market cap, rolling volume,
session/chart all-time highs and a Wilder RSI.

Usage:
    from token_hud import EngineConfig, MetricsEngine

    engine = MetricsEngine(EngineConfig(exchange_rate=150.0))
    engine.ingest('{"price_usd": "0.002", "pair_address": "..."}')
    print(engine.summary().market_cap)
"""

from .config import EngineConfig
from .continuous import (
    ChartBar,
    ChartBatch,
    EventKind,
    LighthouseSnapshot,
    PulseSnapshot,
    TradeEvent,
    TransactionRecord,
    VolumeWindow,
    decode,
)
from .engine import EngineStats, MetricsEngine
from .indicators import RSIEngine, RSIStatus, classify
from .processors import ChartAggregator, LighthouseProcessor, PulseProcessor, TradeProcessor
from .store import MetricsState, MetricsStore, MetricsSummary

__all__ = [
    # Engine
    "EngineConfig",
    "EngineStats",
    "MetricsEngine",
    # Events
    "ChartBar",
    "ChartBatch",
    "EventKind",
    "LighthouseSnapshot",
    "PulseSnapshot",
    "TradeEvent",
    "TransactionRecord",
    "decode",
    # Components
    "ChartAggregator",
    "LighthouseProcessor",
    "PulseProcessor",
    "RSIEngine",
    "RSIStatus",
    "TradeProcessor",
    "VolumeWindow",
    "classify",
    # Store
    "MetricsState",
    "MetricsStore",
    "MetricsSummary",
]
