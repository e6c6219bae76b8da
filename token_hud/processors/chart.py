"""
Chart Aggregator - historical bars and the chart-derived ATH.

Bars are keyed by time: a bar whose time is already stored is dropped,
even if its prices differ. The stored list is kept sorted ascending by
time. The chart ATH market cap is max(high) * token supply and, like the
session ATH, never decreases.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from ..continuous.data_types import ChartBar
from ..store import MetricsStore

logger = logging.getLogger(__name__)


class ChartAggregator:
    """
    Deduplicating store of historical price bars.

    Example:
        chart = ChartAggregator(store)
        added = chart.ingest_bars(batch.bars)
        first, last = chart.time_range()
    """

    def __init__(self, store: MetricsStore):
        self.store = store

    def ingest_bars(self, bars: Iterable[ChartBar]) -> List[ChartBar]:
        """
        Add bars whose time key is not stored yet.

        Returns:
            The newly added bars, in arrival order
        """
        state = self.store.state
        seen = {bar.time for bar in state.chart_bars}
        added: List[ChartBar] = []
        for bar in bars:
            if bar.time in seen:
                continue
            seen.add(bar.time)
            added.append(bar)

        if added:
            # sorted() is stable, so equal keys keep prior order
            state.chart_bars = sorted(state.chart_bars + added, key=lambda b: b.time)

        self._update_ath()

        logger.info(
            f"Chart batch: {len(added)} new bar(s), {len(state.chart_bars)} total"
        )
        return added

    def _update_ath(self) -> None:
        bars = self.store.state.chart_bars
        if not bars:
            return
        max_high = max(bar.high for bar in bars)
        candidate = max_high * self.store.state.token_supply
        if self.store.raise_chart_ath(candidate):
            logger.info(f"Chart ATH market cap raised to {candidate:.2f}")

    def bar_count(self) -> int:
        return len(self.store.state.chart_bars)

    def time_range(self) -> Optional[Tuple[int, int]]:
        """(first, last) bar times, or None when no bars are stored."""
        return self.store.chart_time_range()

    def bars(self) -> List[ChartBar]:
        return list(self.store.state.chart_bars)
