"""Pulse processor: 24h aggregates converted from the native asset to fiat."""

import logging
import math
from typing import Optional

from ..continuous.data_types import PulseSnapshot
from ..store import MetricsStore

logger = logging.getLogger(__name__)


def _finite_or_zero(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value) if math.isfinite(value) else 0.0


class PulseProcessor:
    """
    Applies pulse snapshots to the metrics store.

    Each snapshot fully replaces the previous pulse fields. Native values
    are converted with the exchange rate current at the time the snapshot
    is handled; earlier values are never recalculated.
    """

    def __init__(self, store: MetricsStore, exchange_rate: Optional[float] = None):
        self.store = store
        self._exchange_rate: Optional[float] = None
        if exchange_rate is not None:
            self.set_exchange_rate(exchange_rate)

    @property
    def exchange_rate(self) -> Optional[float]:
        return self._exchange_rate

    def set_exchange_rate(self, rate: float) -> bool:
        """
        Set the native -> fiat rate.

        Returns:
            True if accepted, False if rejected (prior rate retained)
        """
        if isinstance(rate, bool) or not isinstance(rate, (int, float)) \
                or not math.isfinite(rate) or rate <= 0:
            logger.warning(f"Rejected exchange rate {rate!r}, keeping {self._exchange_rate!r}")
            return False
        self._exchange_rate = float(rate)
        return True

    def handle_pulse(self, snapshot: PulseSnapshot) -> None:
        """Replace pulse-derived fields from a snapshot."""
        store = self.store
        state = store.state

        if snapshot.supply is not None:
            store.set_token_supply(snapshot.supply)

        rate = self._exchange_rate
        if rate is None:
            logger.warning("Pulse received before an exchange rate was set; fiat values are 0")
            rate = 0.0

        state.pulse_market_cap = _finite_or_zero(snapshot.market_cap_native) * rate
        state.pulse_volume = _finite_or_zero(snapshot.volume_native) * rate
        state.liquidity = _finite_or_zero(snapshot.liquidity_native) * rate

        holders = snapshot.num_holders
        state.num_holders = holders if isinstance(holders, int) and not isinstance(holders, bool) \
            and holders >= 0 else 0
        state.pulse_timestamp_ms = store.now_ms()
