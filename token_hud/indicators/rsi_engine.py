"""
RSI Engine - Incremental Relative Strength Index

Implements Wilder RSI (the variant charting platforms display):
- Seeded with a simple average of the first `period` gains/losses
- Wilder smoothing (factor 1/period) afterwards
- O(1) incremental updates per price
- Bounded RSI and raw price history (deques) for export

RSI is 100 by definition while the average loss is exactly zero.
"""

import logging
import math
import time
from collections import deque
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = 14
DEFAULT_OVERSOLD = 30.0
DEFAULT_OVERBOUGHT = 70.0
DEFAULT_HISTORY_SIZE = 100
DEFAULT_PRICE_HISTORY_SIZE = 200
DEFAULT_HISTORICAL_INTERVAL_MS = 60_000


class RSIStatus(Enum):
    """Label for an RSI reading."""

    OVERSOLD = "Oversold"
    OVERBOUGHT = "Overbought"
    NEUTRAL = "Neutral"
    CALCULATING = "Calculating"


@dataclass(slots=True)
class RSIPoint:
    """One computed RSI value with the averages behind it."""

    price: float
    rsi: float
    avg_gain: float
    avg_loss: float
    timestamp_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class PricePoint:
    """Raw accepted price."""

    price: float
    timestamp_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def classify(
    rsi: Optional[float],
    oversold_threshold: float = DEFAULT_OVERSOLD,
    overbought_threshold: float = DEFAULT_OVERBOUGHT,
) -> RSIStatus:
    """
    Label an RSI value.

    Returns CALCULATING when the RSI is undefined, OVERSOLD below the lower
    threshold, OVERBOUGHT above the upper one, NEUTRAL otherwise.
    """
    if rsi is None:
        return RSIStatus.CALCULATING
    if rsi < oversold_threshold:
        return RSIStatus.OVERSOLD
    if rsi > overbought_threshold:
        return RSIStatus.OVERBOUGHT
    return RSIStatus.NEUTRAL


def _now_ms() -> int:
    return int(time.time() * 1000)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_valid_price(price: Any) -> bool:
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return False
    return math.isfinite(price) and price > 0


class RSIEngine:
    """
    Wilder RSI over a sequential price stream.

    Example:
        engine = RSIEngine(period=14)
        for price in prices:
            rsi = engine.add_price(price)
        status = classify(engine.current_value())
    """

    def __init__(
        self,
        period: int = DEFAULT_PERIOD,
        history_size: int = DEFAULT_HISTORY_SIZE,
        price_history_size: int = DEFAULT_PRICE_HISTORY_SIZE,
        historical_interval_ms: int = DEFAULT_HISTORICAL_INTERVAL_MS,
    ):
        for name, value in (
            ("period", period),
            ("history_size", history_size),
            ("price_history_size", price_history_size),
            ("historical_interval_ms", historical_interval_ms),
        ):
            if not _is_positive_int(value):
                raise ValueError(f"RSI {name} must be a positive integer, got {value!r}")

        self._period = period
        self._history_size = history_size
        self._price_history_size = price_history_size
        self._historical_interval_ms = historical_interval_ms
        self.reset()

    @property
    def period(self) -> int:
        return self._period

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def avg_gain(self) -> Optional[float]:
        return self._avg_gain

    @property
    def avg_loss(self) -> Optional[float]:
        return self._avg_loss

    @property
    def has_prices(self) -> bool:
        """True once at least one price has been accepted."""
        return self._previous_close is not None

    def reset(self) -> None:
        """Clear all state back to construction defaults."""
        self._previous_close: Optional[float] = None
        self._avg_gain: Optional[float] = None
        self._avg_loss: Optional[float] = None
        self._seed_gains: List[float] = []
        self._seed_losses: List[float] = []
        self._initialized = False
        self._history: Deque[RSIPoint] = deque(maxlen=self._history_size)
        self._prices: Deque[PricePoint] = deque(maxlen=self._price_history_size)

    def add_price(self, price: float, timestamp_ms: Optional[int] = None) -> Optional[float]:
        """
        Add a price and return the RSI, or None while not yet defined.

        Non-positive or non-numeric prices are ignored.
        """
        if not _is_valid_price(price):
            logger.debug(f"Ignoring invalid RSI price {price!r}")
            return None

        ts = _now_ms() if timestamp_ms is None else timestamp_ms
        self._prices.append(PricePoint(float(price), ts))

        if self._previous_close is None:
            self._previous_close = float(price)
            return None

        change = price - self._previous_close
        gain = max(change, 0.0)
        loss = max(-change, 0.0)

        if not self._initialized:
            self._seed_gains.append(gain)
            self._seed_losses.append(loss)

            if len(self._seed_gains) == self._period:
                self._avg_gain = sum(self._seed_gains) / self._period
                self._avg_loss = sum(self._seed_losses) / self._period
                self._initialized = True
        else:
            n = self._period
            self._avg_gain = (self._avg_gain * (n - 1) + gain) / n
            self._avg_loss = (self._avg_loss * (n - 1) + loss) / n

        self._previous_close = float(price)

        if not self._initialized:
            return None

        if self._avg_loss == 0:
            rsi = 100.0
        else:
            rs = self._avg_gain / self._avg_loss
            rsi = 100.0 - (100.0 / (1.0 + rs))

        self._history.append(
            RSIPoint(
                price=float(price),
                rsi=rsi,
                avg_gain=self._avg_gain,
                avg_loss=self._avg_loss,
                timestamp_ms=ts,
            )
        )
        return rsi

    def process_historical_batch(self, series: Sequence[Any]) -> Optional[float]:
        """
        Bootstrap from historical data.

        Accepts (price, timestamp) pairs, bar-like objects or dicts exposing
        close/price and time/timestamp, or bare prices. Bare prices get
        synthetic timestamps spaced by the historical interval and ending
        now.

        Returns:
            RSI after the batch, or None if still undefined
        """
        logger.info(f"Processing {len(series)} historical price points")

        now = _now_ms()
        count = len(series)
        for index, item in enumerate(series):
            price, timestamp = _unpack_price(item)
            if timestamp is None:
                timestamp = now - (count - index) * self._historical_interval_ms
            if _is_valid_price(price):
                self.add_price(price, timestamp)

        current = self.current_value()
        if current is not None:
            logger.info(f"Historical processing complete. Final RSI: {current:.2f}")
        return current

    def current_value(self) -> Optional[float]:
        """RSI from the most recent history entry, or None."""
        return self._history[-1].rsi if self._history else None

    def history(self) -> List[RSIPoint]:
        return list(self._history)

    def price_history(self) -> List[PricePoint]:
        return list(self._prices)

    def config_info(self) -> Dict[str, Any]:
        return {
            "period": self._period,
            "initialized": self._initialized,
            "data_points": len(self._history),
            "current_rsi": self.current_value(),
        }

    def export_data(self) -> Dict[str, Any]:
        """All RSI data for downloads."""
        return {
            "config": self.config_info(),
            "rsi_history": [p.to_dict() for p in self._history],
            "price_history": [p.to_dict() for p in self._prices],
        }


def _unpack_price(item: Any) -> Tuple[Any, Optional[int]]:
    """Split a historical item into (price, timestamp or None)."""
    if isinstance(item, (tuple, list)):
        if len(item) >= 2:
            return item[0], item[1]
        return (item[0] if item else None), None
    if isinstance(item, dict):
        price = item.get("close", item.get("price"))
        timestamp = item.get("time", item.get("timestamp"))
        return price, timestamp
    if hasattr(item, "close"):
        return item.close, getattr(item, "time", None)
    return item, None
