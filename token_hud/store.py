"""
Metrics Store - aggregate root for all derived state.

Owns the MetricsState mutated by the processors, together with the volume
window and RSI engine, and builds the presentation payload read by the
display and export layers.
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import EngineConfig
from .continuous.data_types import ChartBar, TransactionRecord
from .continuous.volume_window import VolumeWindow, wall_clock_ms
from .display.formatters import format_compact_currency, format_currency, format_number
from .indicators.rsi_engine import RSIEngine, RSIStatus, classify

logger = logging.getLogger(__name__)


@dataclass
class MetricsState:
    """
    Complete derived state for one instrument.

    ATH fields only ever grow; token_supply is always positive; chart_bars
    stays sorted by time with unique keys; transactions is append-only.
    """

    token_supply: float

    # Trade-derived
    last_price: float = 0.0
    last_market_cap: float = 0.0
    session_ath_market_cap: float = 0.0
    trade_count: int = 0

    # Pulse-derived (fiat)
    pulse_market_cap: float = 0.0
    pulse_volume: float = 0.0
    num_holders: int = 0
    liquidity: float = 0.0
    pulse_timestamp_ms: Optional[int] = None

    # Lighthouse-derived
    lighthouse_volume_5m: float = 0.0

    # Chart-derived
    chart_ath_market_cap: float = 0.0
    chart_bars: List[ChartBar] = field(default_factory=list)

    transactions: List[TransactionRecord] = field(default_factory=list)


@dataclass
class MetricsSummary:
    """Presentation payload: every field pre-formatted for display."""

    price: str
    market_cap: str
    volume_1m: str
    volume_5m: str
    session_ath_market_cap: str
    pulse_market_cap: str
    pulse_volume: str
    holders: str
    liquidity: str
    lighthouse_volume_5m: str
    chart_ath_market_cap: str
    rsi: str
    rsi_status: RSIStatus

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["rsi_status"] = self.rsi_status.value
        return data


class MetricsStore:
    """
    Aggregate root holding all derived metrics.

    Processors mutate `state` through the helpers below; everything else
    reads through the accessors.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.config = config or EngineConfig()
        self._clock = clock or wall_clock_ms
        self.volume_window = VolumeWindow(self.config.volume_horizon_minutes, clock=self._clock)
        self.rsi = RSIEngine(
            period=self.config.rsi_period,
            history_size=self.config.rsi_history_size,
            price_history_size=self.config.price_history_size,
            historical_interval_ms=self.config.historical_interval_ms,
        )
        self.state = MetricsState(token_supply=self.config.default_token_supply)

    def now_ms(self) -> int:
        return self._clock()

    # ------------------------------------------------------------------
    # Mutators (used by processors)
    # ------------------------------------------------------------------

    def set_token_supply(self, supply: float) -> bool:
        """Replace the token supply. Rejects non-finite or non-positive values."""
        if isinstance(supply, bool) or not isinstance(supply, (int, float)):
            logger.warning(f"Rejected token supply {supply!r}: not a number")
            return False
        if not math.isfinite(supply) or supply <= 0:
            logger.warning(f"Rejected token supply {supply!r}: must be positive")
            return False
        self.state.token_supply = float(supply)
        return True

    def raise_session_ath(self, market_cap: float) -> bool:
        if market_cap > self.state.session_ath_market_cap:
            self.state.session_ath_market_cap = market_cap
            return True
        return False

    def raise_chart_ath(self, market_cap: float) -> bool:
        if market_cap > self.state.chart_ath_market_cap:
            self.state.chart_ath_market_cap = market_cap
            return True
        return False

    def reset_indicators(self) -> None:
        """Reinitialize RSI and volume window; metrics state is untouched."""
        self.rsi.reset()
        self.volume_window.clear()

    def reset(self) -> None:
        """Zero all metrics state and indicators."""
        self.reset_indicators()
        self.state = MetricsState(token_supply=self.config.default_token_supply)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def token_supply(self) -> float:
        return self.state.token_supply

    @property
    def last_price(self) -> float:
        return self.state.last_price

    @property
    def last_market_cap(self) -> float:
        return self.state.last_market_cap

    @property
    def session_ath_market_cap(self) -> float:
        return self.state.session_ath_market_cap

    @property
    def chart_ath_market_cap(self) -> float:
        return self.state.chart_ath_market_cap

    def volume(self, window_minutes: float, now_ms: Optional[int] = None) -> float:
        return self.volume_window.sum(window_minutes, now_ms)

    def current_rsi(self) -> Optional[float]:
        return self.rsi.current_value()

    def rsi_status(self) -> RSIStatus:
        return classify(
            self.rsi.current_value(),
            self.config.rsi_oversold,
            self.config.rsi_overbought,
        )

    def pulse_age_ms(self, now_ms: Optional[int] = None) -> Optional[int]:
        """Milliseconds since the last pulse, or None if none was received."""
        if self.state.pulse_timestamp_ms is None:
            return None
        now = self.now_ms() if now_ms is None else now_ms
        return now - self.state.pulse_timestamp_ms

    def chart_time_range(self) -> Optional[Tuple[int, int]]:
        bars = self.state.chart_bars
        if not bars:
            return None
        return bars[0].time, bars[-1].time

    # ------------------------------------------------------------------
    # Presentation / export
    # ------------------------------------------------------------------

    def formatted_summary(self, now_ms: Optional[int] = None) -> MetricsSummary:
        """
        Build the presentation payload.

        Fields whose backing value was never set render as the placeholder.
        """
        s = self.state
        ph = self.config.placeholder
        short_window, long_window = self.config.summary_windows_minutes
        traded = s.trade_count > 0
        rsi = self.rsi.current_value()

        def money(value: float) -> str:
            return format_currency(value, placeholder=ph) if value > 0 else ph

        def compact(value: float) -> str:
            return format_compact_currency(value, placeholder=ph) if value > 0 else ph

        return MetricsSummary(
            price=(
                format_currency(s.last_price, min_fraction_digits=2, max_fraction_digits=10, placeholder=ph)
                if s.last_price > 0 else ph
            ),
            market_cap=money(s.last_market_cap),
            volume_1m=(
                format_compact_currency(self.volume(short_window, now_ms), placeholder=ph)
                if traded else ph
            ),
            volume_5m=(
                format_compact_currency(self.volume(long_window, now_ms), placeholder=ph)
                if traded else ph
            ),
            session_ath_market_cap=money(s.session_ath_market_cap),
            pulse_market_cap=money(s.pulse_market_cap),
            pulse_volume=compact(s.pulse_volume),
            holders=(
                format_number(s.num_holders, max_fraction_digits=0, min_fraction_digits=0, placeholder=ph)
                if s.pulse_timestamp_ms is not None else ph
            ),
            liquidity=compact(s.liquidity),
            lighthouse_volume_5m=compact(s.lighthouse_volume_5m),
            chart_ath_market_cap=money(s.chart_ath_market_cap),
            rsi=format_number(rsi, placeholder=ph) if rsi is not None else ph,
            rsi_status=self.rsi_status(),
        )

    def export_transactions(self) -> List[Dict[str, Any]]:
        """Full transaction log, oldest first."""
        return [record.to_dict() for record in self.state.transactions]

    def export_chart_bars(self) -> List[Dict[str, Any]]:
        """Stored chart bars sorted by time, JSON-serializable."""
        return [bar.to_dict() for bar in self.state.chart_bars]
