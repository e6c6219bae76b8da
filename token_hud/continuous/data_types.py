"""
Core data types for the token metrics engine.

These are the atomic units flowing through the system. Raw payloads are
parsed into these types by the ingestion layer; processors only ever see
strongly typed, already-parsed values.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

# =============================================================================
# EVENT TAG
# =============================================================================


class EventKind(Enum):
    """Discriminator for the market event variants."""

    TRADE = "trade"
    PULSE = "pulse"
    LIGHTHOUSE = "lighthouse"
    CHART_BATCH = "chart_batch"


# =============================================================================
# RAW DATA EVENTS (from the ingestion boundary)
# =============================================================================


@dataclass(frozen=True, slots=True)
class TradeEvent:
    """
    Single swap on the monitored pair.

    Prices and values are fiat (USD); liquidity fields are as reported by
    the venue (native asset and token units).
    """

    kind: ClassVar[EventKind] = EventKind.TRADE

    timestamp_ms: int
    price: float
    transaction_value: float = 0.0
    pair_address: str = ""
    signature: str = ""
    side: str = ""
    maker_address: str = ""
    liquidity_native: float = 0.0
    liquidity_token: float = 0.0


@dataclass(frozen=True, slots=True)
class PulseSnapshot:
    """Periodic aggregate snapshot, native-asset denominated."""

    kind: ClassVar[EventKind] = EventKind.PULSE

    market_cap_native: float = 0.0
    volume_native: float = 0.0
    num_holders: int = 0
    liquidity_native: float = 0.0
    supply: Optional[float] = None
    received_at_ms: Optional[int] = None


@dataclass(frozen=True, slots=True)
class LighthouseSnapshot:
    """Broad-market aggregate across all tracked pairs."""

    kind: ClassVar[EventKind] = EventKind.LIGHTHOUSE

    five_minute_total_volume: Optional[float] = None


@dataclass(frozen=True, slots=True)
class ChartBar:
    """OHLCV bar keyed by its open time (epoch milliseconds)."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChartBatch:
    """A batch of historical bars as delivered by one chart response."""

    kind: ClassVar[EventKind] = EventKind.CHART_BATCH

    bars: List[ChartBar] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.bars)


MarketEvent = Union[TradeEvent, PulseSnapshot, LighthouseSnapshot, ChartBatch]


# =============================================================================
# DERIVED RECORDS
# =============================================================================


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """Normalized trade as kept in the append-only transaction log."""

    timestamp_ms: int
    price_usd: float
    total_usd: float
    market_cap_usd: float
    token_supply: float
    pair_address: str
    signature: str
    side: str
    maker_address: str
    liquidity_native: float
    liquidity_token: float

    @classmethod
    def from_trade(
        cls,
        trade: TradeEvent,
        market_cap: float,
        token_supply: float,
        total_usd: Optional[float] = None,
    ) -> "TransactionRecord":
        """Build from a trade; total_usd overrides the trade's raw value."""
        return cls(
            timestamp_ms=trade.timestamp_ms,
            price_usd=trade.price,
            total_usd=trade.transaction_value if total_usd is None else total_usd,
            market_cap_usd=market_cap,
            token_supply=token_supply,
            pair_address=trade.pair_address,
            signature=trade.signature,
            side=trade.side,
            maker_address=trade.maker_address,
            liquidity_native=trade.liquidity_native,
            liquidity_token=trade.liquidity_token,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)
