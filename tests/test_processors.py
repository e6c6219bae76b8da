"""
Tests for the trade, pulse and lighthouse processors.

Verifies:
- Market cap derivation and session ATH monotonicity
- Rejection of invalid input without state change
- Native -> fiat conversion and supply replacement
"""

import math

import pytest

from token_hud import EngineConfig, MetricsStore
from token_hud.continuous.data_types import LighthouseSnapshot, PulseSnapshot, TradeEvent
from token_hud.processors import LighthouseProcessor, PulseProcessor, TradeProcessor

from conftest import T0


def trade(price, ts=T0, value=10.0, signature="sig"):
    """Helper to create a trade event"""
    return TradeEvent(timestamp_ms=ts, price=price, transaction_value=value, signature=signature)


# ============================================================================
# TRADES
# ============================================================================

class TestTradeProcessor:
    """Tests for trade handling"""

    def test_market_cap_from_supply(self, store):
        """Test market cap as price times the current supply"""
        processor = TradeProcessor(store)

        assert processor.handle_trade(trade(0.002))

        assert store.last_price == 0.002
        assert store.last_market_cap == pytest.approx(2_000_000.0)
        assert store.session_ath_market_cap == pytest.approx(2_000_000.0)
        assert store.state.trade_count == 1

    def test_session_ath_never_decreases(self, store):
        """Test that a lower trade does not lower the session ATH"""
        processor = TradeProcessor(store)
        for price in [0.001, 0.003, 0.002]:
            processor.handle_trade(trade(price))

        assert store.last_market_cap == pytest.approx(2_000_000.0)
        assert store.session_ath_market_cap == pytest.approx(3_000_000.0)

    def test_ath_independent_of_arrival_order(self, clock):
        """Test that the session ATH does not depend on arrival order"""
        prices = [(T0 + 3, 0.004), (T0 + 1, 0.001), (T0 + 2, 0.003)]
        a = MetricsStore(EngineConfig(), clock=clock)
        b = MetricsStore(EngineConfig(), clock=clock)
        for ts, price in prices:
            TradeProcessor(a).handle_trade(trade(price, ts))
        for ts, price in sorted(prices):
            TradeProcessor(b).handle_trade(trade(price, ts))

        assert a.session_ath_market_cap == b.session_ath_market_cap

    def test_volume_recorded(self, store, clock):
        """Test that trade values accumulate in the volume window"""
        processor = TradeProcessor(store)
        processor.handle_trade(trade(0.002, ts=clock(), value=125.5))
        processor.handle_trade(trade(0.002, ts=clock(), value=74.5))

        assert store.volume(1) == pytest.approx(200.0)

    @pytest.mark.parametrize("value", [math.nan, math.inf, -25.0])
    def test_unusable_value_logged_as_zero(self, store, clock, value):
        """Test that an unusable trade value is zero in both volume and the log"""
        processor = TradeProcessor(store)

        assert processor.handle_trade(trade(0.002, ts=clock(), value=value))
        processor.handle_trade(trade(0.002, ts=clock(), value=30.0, signature="next"))

        log = store.export_transactions()
        assert log[0]["total_usd"] == 0.0
        assert log[1]["total_usd"] == 30.0
        assert store.volume(1) == pytest.approx(30.0)
        assert store.state.trade_count == 2

    def test_transaction_log(self, store):
        """Test the appended transaction records"""
        processor = TradeProcessor(store)
        processor.handle_trade(trade(0.002, signature="a"))
        processor.handle_trade(trade(0.004, signature="b"))

        log = store.export_transactions()
        assert [row["signature"] for row in log] == ["a", "b"]
        assert log[1]["market_cap_usd"] == pytest.approx(4_000_000.0)
        assert log[1]["token_supply"] == 1_000_000_000.0
        assert log[1]["total_usd"] == 10.0

    def test_feeds_rsi(self, store):
        """Test that accepted prices are fed to RSI"""
        processor = TradeProcessor(store)
        for i, price in enumerate([1.0, 1.1, 1.05]):
            processor.handle_trade(trade(price, ts=T0 + i))

        assert [p.price for p in store.rsi.price_history()] == [1.0, 1.1, 1.05]

    @pytest.mark.parametrize("price", [0.0, -0.5, math.nan, math.inf])
    def test_invalid_price_rejected(self, store, price):
        """Test that an invalid price leaves every metric unchanged"""
        processor = TradeProcessor(store)
        processor.handle_trade(trade(0.002))

        assert not processor.handle_trade(trade(price))

        assert store.last_price == 0.002
        assert store.state.trade_count == 1
        assert len(store.state.transactions) == 1
        assert len(store.volume_window) == 1


# ============================================================================
# PULSE
# ============================================================================

class TestPulseProcessor:
    """Tests for pulse snapshot handling"""

    def test_native_values_converted(self, store, clock):
        """Test native values converted to fiat at the exchange rate"""
        processor = PulseProcessor(store, exchange_rate=150.0)
        processor.handle_pulse(PulseSnapshot(
            market_cap_native=1000.0,
            volume_native=20.0,
            num_holders=321,
            liquidity_native=55.0,
        ))

        state = store.state
        assert state.pulse_market_cap == pytest.approx(150_000.0)
        assert state.pulse_volume == pytest.approx(3_000.0)
        assert state.liquidity == pytest.approx(8_250.0)
        assert state.num_holders == 321
        assert state.pulse_timestamp_ms == clock()

    def test_supply_replaced(self, store):
        """Test that a reported supply replaces the current one"""
        PulseProcessor(store, exchange_rate=1.0).handle_pulse(PulseSnapshot(supply=5e8))
        assert store.token_supply == 5e8

    @pytest.mark.parametrize("supply", [0.0, -1.0, math.nan])
    def test_invalid_supply_ignored_rest_applies(self, store, supply):
        """Test that a bad supply is ignored while the rest of the snapshot applies"""
        processor = PulseProcessor(store, exchange_rate=2.0)
        processor.handle_pulse(PulseSnapshot(market_cap_native=10.0, supply=supply))

        assert store.token_supply == 1e9
        assert store.state.pulse_market_cap == 20.0

    def test_snapshot_replaces_previous(self, store):
        """Test that each snapshot replaces all pulse fields"""
        processor = PulseProcessor(store, exchange_rate=2.0)
        processor.handle_pulse(PulseSnapshot(market_cap_native=10.0, num_holders=5))
        processor.handle_pulse(PulseSnapshot(volume_native=3.0))

        assert store.state.pulse_market_cap == 0.0
        assert store.state.pulse_volume == 6.0
        assert store.state.num_holders == 0

    def test_rate_change_not_retroactive(self, store):
        """Test that a new rate applies only to later snapshots"""
        processor = PulseProcessor(store, exchange_rate=100.0)
        processor.handle_pulse(PulseSnapshot(market_cap_native=1.0))

        assert processor.set_exchange_rate(200.0)
        assert store.state.pulse_market_cap == 100.0

        processor.handle_pulse(PulseSnapshot(market_cap_native=1.0))
        assert store.state.pulse_market_cap == 200.0

    @pytest.mark.parametrize("rate", [0, -3.0, math.inf, math.nan, "150", None])
    def test_invalid_rate_rejected(self, store, rate):
        """Test that an invalid exchange rate keeps the previous one"""
        processor = PulseProcessor(store, exchange_rate=150.0)
        assert not processor.set_exchange_rate(rate)
        assert processor.exchange_rate == 150.0

    def test_no_rate_gives_zero_fiat(self, store, caplog):
        """Test that fiat values are zero without an exchange rate"""
        processor = PulseProcessor(store)
        processor.handle_pulse(PulseSnapshot(market_cap_native=1000.0, num_holders=7))

        assert store.state.pulse_market_cap == 0.0
        assert store.state.num_holders == 7
        assert "exchange rate" in caplog.text

    def test_non_finite_native_values_become_zero(self, store):
        """Test that non-finite native values convert to zero"""
        processor = PulseProcessor(store, exchange_rate=2.0)
        processor.handle_pulse(PulseSnapshot(market_cap_native=math.nan, volume_native=math.inf))

        assert store.state.pulse_market_cap == 0.0
        assert store.state.pulse_volume == 0.0


# ============================================================================
# LIGHTHOUSE
# ============================================================================

class TestLighthouseProcessor:
    """Tests for broad-market volume snapshots"""

    def test_value_stored(self, store):
        """Test that the five-minute volume is stored"""
        processor = LighthouseProcessor(store)
        assert processor.handle_lighthouse_snapshot(LighthouseSnapshot(12345.6))
        assert store.state.lighthouse_volume_5m == 12345.6

    @pytest.mark.parametrize("value", [None, math.nan, -1.0])
    def test_absent_value_keeps_prior(self, store, value):
        """Test that a missing or invalid value keeps the prior one"""
        processor = LighthouseProcessor(store)
        processor.handle_lighthouse_snapshot(LighthouseSnapshot(500.0))

        assert not processor.handle_lighthouse_snapshot(LighthouseSnapshot(value))
        assert store.state.lighthouse_volume_5m == 500.0

    def test_zero_is_a_real_value(self, store):
        """Test that zero volume replaces the prior value"""
        processor = LighthouseProcessor(store)
        processor.handle_lighthouse_snapshot(LighthouseSnapshot(500.0))
        processor.handle_lighthouse_snapshot(LighthouseSnapshot(0.0))
        assert store.state.lighthouse_volume_5m == 0.0
