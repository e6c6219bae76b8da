"""
Continuous market data: typed events, the ingestion boundary and the
streaming containers the engine is built on.

Flow:
```
RAW PAYLOADS (dict / list / JSON text)
        ↓
INGESTION (parse-with-fallback, classify once)
        ↓
TYPED EVENTS
├─ TradeEvent
├─ PulseSnapshot
├─ LighthouseSnapshot
└─ ChartBatch
```
"""

from .data_types import (
    ChartBar,
    ChartBatch,
    EventKind,
    LighthouseSnapshot,
    MarketEvent,
    PulseSnapshot,
    TradeEvent,
    TransactionRecord,
)
from .ingestion import (
    MalformedEventError,
    classify_payload,
    decode,
    parse_chart_batch,
    parse_lighthouse,
    parse_pulse,
    parse_trade,
)
from .volume_window import VolumeEntry, VolumeWindow

__all__ = [
    # Data types
    "ChartBar",
    "ChartBatch",
    "EventKind",
    "LighthouseSnapshot",
    "MarketEvent",
    "PulseSnapshot",
    "TradeEvent",
    "TransactionRecord",
    # Ingestion
    "MalformedEventError",
    "classify_payload",
    "decode",
    "parse_chart_batch",
    "parse_lighthouse",
    "parse_pulse",
    "parse_trade",
    # Containers
    "VolumeEntry",
    "VolumeWindow",
]
