"""
Metrics Engine

Wires together:
- Ingestion (raw payload -> typed event)
- Processors (one per event variant)
- Metrics store (aggregate root)

This is the main entry point. Each engine instance owns its own state, so
several instruments can be tracked side by side.

Architecture:
```
RAW PAYLOAD ──> INGESTION ──> TYPED EVENT
                                 │
        ┌──────────────┬─────────┴────┬──────────────┐
        ↓              ↓              ↓              ↓
  TradeProcessor  PulseProcessor  Lighthouse    ChartAggregator
        │              │              │              │
        └──────────────┴──────┬───────┴──────────────┘
                              ↓
                        METRICS STORE
                        ├─ VolumeWindow
                        ├─ RSIEngine
                        └─ MetricsState
```

The engine assumes a single writer: calls run to completion, nothing
blocks, and there is no internal locking. Callers multiplexing sources
across threads must serialize calls into the engine.

Usage:
    engine = MetricsEngine(EngineConfig(exchange_rate=150.0))

    for message in interceptor_messages:
        engine.ingest(message)

    summary = engine.summary()
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .config import EngineConfig
from .continuous.data_types import (
    ChartBatch,
    EventKind,
    LighthouseSnapshot,
    MarketEvent,
    PulseSnapshot,
    TradeEvent,
)
from .continuous.ingestion import decode
from .processors import ChartAggregator, LighthouseProcessor, PulseProcessor, TradeProcessor
from .store import MetricsStore, MetricsSummary

logger = logging.getLogger(__name__)


@dataclass
class EngineStats:
    """Counters for events seen by an engine."""

    handled: Dict[EventKind, int] = field(default_factory=lambda: {k: 0 for k in EventKind})
    rejected: int = 0  # invalid or no-op events
    undecodable: int = 0


class MetricsEngine:
    """
    Explicit engine instance owning a MetricsStore and its processors.

    Usage:
        engine = MetricsEngine()
        engine.set_exchange_rate(150.0)

        @engine.on_update
        def refresh(kind, store):
            render(store.formatted_summary())

        engine.handle(TradeEvent(timestamp_ms=ts, price=0.002))
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.config = config or EngineConfig()
        self.store = MetricsStore(self.config, clock=clock)

        self.trades = TradeProcessor(self.store)
        self.pulse = PulseProcessor(self.store, exchange_rate=self.config.exchange_rate)
        self.lighthouse = LighthouseProcessor(self.store)
        self.chart = ChartAggregator(self.store)

        self._handlers: Dict[EventKind, Callable[[Any], bool]] = {
            EventKind.TRADE: self._handle_trade,
            EventKind.PULSE: self._handle_pulse,
            EventKind.LIGHTHOUSE: self._handle_lighthouse,
            EventKind.CHART_BATCH: self._handle_chart_batch,
        }
        self._on_update_callbacks: List[Callable[[EventKind, MetricsStore], Any]] = []
        self.stats = EngineStats()

    # === Callback Registration ===

    def on_update(self, callback: Callable[[EventKind, MetricsStore], Any]):
        """Register a callback run after every applied event. Usable as a decorator."""
        self._on_update_callbacks.append(callback)
        return callback

    def _notify(self, kind: EventKind) -> None:
        for callback in self._on_update_callbacks:
            try:
                callback(kind, self.store)
            except Exception as e:
                logger.error(f"Update callback error: {e}")

    # === Event Handling ===

    def handle(self, event: MarketEvent) -> bool:
        """
        Apply one typed event.

        Returns:
            True if the event changed state, False if it was rejected or changed nothing
        """
        handler = self._handlers.get(getattr(event, "kind", None))
        if handler is None:
            logger.warning(f"No handler for event of type {type(event).__name__}")
            self.stats.rejected += 1
            return False

        applied = handler(event)
        if applied:
            self.stats.handled[event.kind] += 1
            self._notify(event.kind)
        else:
            self.stats.rejected += 1
        return applied

    def ingest(self, raw: Any, received_at_ms: Optional[int] = None) -> bool:
        """Decode a raw payload and apply it. Returns False if nothing was applied."""
        event = decode(raw, received_at_ms)
        if event is None:
            self.stats.undecodable += 1
            return False
        return self.handle(event)

    def _handle_trade(self, event: TradeEvent) -> bool:
        return self.trades.handle_trade(event)

    def _handle_pulse(self, event: PulseSnapshot) -> bool:
        self.pulse.handle_pulse(event)
        return True

    def _handle_lighthouse(self, event: LighthouseSnapshot) -> bool:
        return self.lighthouse.handle_lighthouse_snapshot(event)

    def _handle_chart_batch(self, event: ChartBatch) -> bool:
        """Applied only if bars were added, the chart ATH rose or RSI was seeded."""
        store = self.store
        rsi = store.rsi
        ath_before = store.chart_ath_market_cap

        added = self.chart.ingest_bars(event.bars)

        bootstrapped = False
        if self.config.bootstrap_rsi_from_chart and not rsi.has_prices and self.chart.bar_count():
            rsi.process_historical_batch([(bar.close, bar.time) for bar in self.chart.bars()])
            bootstrapped = rsi.has_prices
        return bool(added) or bootstrapped or store.chart_ath_market_cap != ath_before

    # === Configuration ===

    def set_exchange_rate(self, rate: float) -> bool:
        return self.pulse.set_exchange_rate(rate)

    # === Lifecycle ===

    def reset(self) -> None:
        """Reinitialize all metrics state, RSI and volume window."""
        logger.info("Resetting metrics engine state")
        self.store.reset()
        self.stats = EngineStats()

    def reset_indicators(self) -> None:
        """Reset RSI and volume window only."""
        self.store.reset_indicators()

    # === Output ===

    def summary(self, now_ms: Optional[int] = None) -> MetricsSummary:
        return self.store.formatted_summary(now_ms)

    def export_transactions(self) -> List[Dict[str, Any]]:
        return self.store.export_transactions()

    def export_chart_bars(self) -> List[Dict[str, Any]]:
        return self.store.export_chart_bars()
