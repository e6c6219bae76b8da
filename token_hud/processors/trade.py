"""Trade processor: price, market cap, session ATH, volume and RSI from swaps."""

import logging
import math

from ..continuous.data_types import TradeEvent, TransactionRecord
from ..store import MetricsStore

logger = logging.getLogger(__name__)


class TradeProcessor:
    """
    Applies individual trades to the metrics store.

    Each accepted trade:
    - sets last price and last market cap (price * token supply)
    - raises the session ATH market cap if exceeded
    - records its fiat value in the 24h volume window
    - feeds its price to the RSI engine
    - is appended to the transaction log
    """

    def __init__(self, store: MetricsStore):
        self.store = store

    def handle_trade(self, trade: TradeEvent) -> bool:
        """
        Process one trade.

        Returns:
            True if applied, False if rejected (state unchanged)
        """
        price = trade.price
        if isinstance(price, bool) or not isinstance(price, (int, float)) \
                or not math.isfinite(price) or price <= 0:
            logger.warning(f"Rejected trade {trade.signature or '<no signature>'}: invalid price {price!r}")
            return False

        value = trade.transaction_value
        if isinstance(value, bool) or not isinstance(value, (int, float)) \
                or not math.isfinite(value) or value < 0:
            logger.debug(f"Trade {trade.signature or '<no signature>'} value {value!r} recorded as 0")
            value = 0.0

        store = self.store
        state = store.state
        supply = state.token_supply
        market_cap = price * supply

        store.volume_window.record(trade.timestamp_ms, float(value))
        if store.raise_session_ath(market_cap):
            logger.debug(f"New session ATH market cap: {market_cap:.2f}")

        state.last_price = price
        state.last_market_cap = market_cap
        state.trade_count += 1
        state.transactions.append(
            TransactionRecord.from_trade(trade, market_cap, supply, total_usd=float(value))
        )

        store.rsi.add_price(price, trade.timestamp_ms)
        return True
