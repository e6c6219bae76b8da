"""
Ingestion Layer - raw payloads to typed market events.

Upstream interceptors hand over decoded JSON (dicts, lists or raw text)
whose numeric fields may arrive as numbers or numeric strings. This module
is the only place that coerces: everything downstream receives strongly
typed events.

Handles:
- trade messages (price_usd, total_usd, pair_address, ...)
- pulse snapshots (marketCapSol, volumeSol, numHolders, liquiditySol, supply)
- lighthouse aggregates (window -> protocol scope -> totalVolume)
- chart batches (list of bars with time/open/high/low/close/volume)
"""

import json
import logging
import math
import time
from typing import Any, Dict, Iterable, List, Optional, Union

from .data_types import (
    ChartBar,
    ChartBatch,
    EventKind,
    LighthouseSnapshot,
    MarketEvent,
    PulseSnapshot,
    TradeEvent,
)

logger = logging.getLogger(__name__)

LIGHTHOUSE_WINDOW_KEY = "5m"
LIGHTHOUSE_SCOPE_KEY = "all"
LIGHTHOUSE_VOLUME_KEY = "totalVolume"


class MalformedEventError(ValueError):
    """Raised when a payload is missing or has unparseable required fields."""

    def __init__(self, kind: EventKind, message: str):
        self.kind = kind
        super().__init__(f"Malformed {kind.value} payload: {message}")


# =============================================================================
# NUMERIC COERCION
# =============================================================================


def parse_float(value: Any) -> Optional[float]:
    """Parse a number or numeric string into a finite float, else None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return result if math.isfinite(result) else None


def parse_float_or(value: Any, default: float = 0.0) -> float:
    parsed = parse_float(value)
    return default if parsed is None else parsed


def parse_int_or(value: Any, default: int = 0) -> int:
    parsed = parse_float(value)
    return default if parsed is None else int(parsed)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _now_ms() -> int:
    return int(time.time() * 1000)


# =============================================================================
# PER-VARIANT PARSERS
# =============================================================================


def _build_trade(data: Dict[str, Any], received_at_ms: Optional[int]) -> TradeEvent:
    price = parse_float(data.get("price_usd"))
    if price is None:
        raise MalformedEventError(EventKind.TRADE, f"price_usd={data.get('price_usd')!r}")

    timestamp = parse_float(data.get("timestamp", data.get("created_at_ms")))
    if timestamp is None:
        timestamp = received_at_ms if received_at_ms is not None else _now_ms()

    return TradeEvent(
        timestamp_ms=int(timestamp),
        price=price,
        transaction_value=max(parse_float_or(data.get("total_usd")), 0.0),
        pair_address=_text(data.get("pair_address")),
        signature=_text(data.get("signature")),
        side=_text(data.get("type")),
        maker_address=_text(data.get("maker_address")),
        liquidity_native=parse_float_or(data.get("liquidity_sol")),
        liquidity_token=parse_float_or(data.get("liquidity_token")),
    )


def _build_pulse(data: Dict[str, Any], received_at_ms: Optional[int]) -> PulseSnapshot:
    return PulseSnapshot(
        market_cap_native=parse_float_or(data.get("marketCapSol")),
        volume_native=parse_float_or(data.get("volumeSol")),
        num_holders=max(parse_int_or(data.get("numHolders")), 0),
        liquidity_native=parse_float_or(data.get("liquiditySol")),
        supply=parse_float(data.get("supply")),
        received_at_ms=received_at_ms if received_at_ms is not None else _now_ms(),
    )


def _build_lighthouse(data: Dict[str, Any]) -> LighthouseSnapshot:
    window = data.get(LIGHTHOUSE_WINDOW_KEY)
    scope = window.get(LIGHTHOUSE_SCOPE_KEY) if isinstance(window, dict) else None
    raw = scope.get(LIGHTHOUSE_VOLUME_KEY) if isinstance(scope, dict) else None
    return LighthouseSnapshot(five_minute_total_volume=parse_float(raw))


def _build_bar(data: Dict[str, Any]) -> ChartBar:
    values = {}
    for key in ("time", "open", "high", "low", "close"):
        parsed = parse_float(data.get(key))
        if parsed is None:
            raise MalformedEventError(EventKind.CHART_BATCH, f"bar {key}={data.get(key)!r}")
        values[key] = parsed

    return ChartBar(
        time=int(values["time"]),
        open=values["open"],
        high=values["high"],
        low=values["low"],
        close=values["close"],
        volume=parse_float_or(data.get("volume")),
    )


def parse_trade(data: Dict[str, Any], received_at_ms: Optional[int] = None) -> Optional[TradeEvent]:
    """Parse a raw trade message. Returns None (and logs) if malformed."""
    try:
        return _build_trade(data, received_at_ms)
    except MalformedEventError as e:
        logger.warning(f"Skipping trade: {e}")
        return None


def parse_pulse(data: Dict[str, Any], received_at_ms: Optional[int] = None) -> PulseSnapshot:
    """Parse a raw pulse object. Missing or non-numeric fields become 0."""
    return _build_pulse(data, received_at_ms)


def parse_lighthouse(data: Dict[str, Any]) -> LighthouseSnapshot:
    """Parse a lighthouse object; the volume is None when absent or non-numeric."""
    return _build_lighthouse(data)


def parse_chart_batch(bars: Iterable[Any]) -> ChartBatch:
    """
    Parse raw bars, dropping the ones that are not usable.

    A bar without a numeric time/open/high/low/close is skipped with a
    warning; the rest of the batch is kept.
    """
    parsed: List[ChartBar] = []
    skipped = 0
    for raw in bars:
        if not isinstance(raw, dict):
            skipped += 1
            continue
        try:
            parsed.append(_build_bar(raw))
        except MalformedEventError as e:
            logger.debug(str(e))
            skipped += 1

    if skipped:
        logger.warning(f"Dropped {skipped} malformed chart bar(s)")
    return ChartBatch(bars=parsed)


# =============================================================================
# CLASSIFICATION
# =============================================================================


def classify_payload(payload: Any) -> Optional[EventKind]:
    """Determine which variant an untyped payload carries."""
    if isinstance(payload, list):
        return EventKind.CHART_BATCH
    if not isinstance(payload, dict):
        return None
    if "bars" in payload and isinstance(payload["bars"], list):
        return EventKind.CHART_BATCH
    if "pair_address" in payload or "price_usd" in payload:
        return EventKind.TRADE
    if "marketCapSol" in payload or "numHolders" in payload:
        return EventKind.PULSE
    if isinstance(payload.get(LIGHTHOUSE_WINDOW_KEY), dict):
        return EventKind.LIGHTHOUSE
    return None


def decode(
    raw: Union[str, bytes, Dict[str, Any], List[Any]],
    received_at_ms: Optional[int] = None,
) -> Optional[MarketEvent]:
    """
    Turn one raw message into a typed event.

    Returns None for unparseable text, unrecognized shapes and malformed
    trades. Never raises for bad content.
    """
    payload: Any = raw
    if isinstance(raw, (str, bytes)):
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Error parsing message: {e}")
            return None

    kind = classify_payload(payload)
    if kind is None:
        logger.debug(f"Ignoring unrecognized payload of type {type(payload).__name__}")
        return None

    if kind is EventKind.TRADE:
        return parse_trade(payload, received_at_ms)
    if kind is EventKind.PULSE:
        return parse_pulse(payload, received_at_ms)
    if kind is EventKind.LIGHTHOUSE:
        return parse_lighthouse(payload)
    bars = payload["bars"] if isinstance(payload, dict) else payload
    return parse_chart_batch(bars)
