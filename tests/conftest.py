import pytest

from token_hud import EngineConfig, MetricsEngine, MetricsStore

T0 = 1_700_000_000_000
HOUR_MS = 3_600_000


class FakeClock:
    """Settable millisecond clock for deterministic windows."""

    def __init__(self, now_ms: int = T0):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock():
    """Clock pinned at T0"""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Store with default config on the test clock"""
    return MetricsStore(EngineConfig(), clock=clock)


@pytest.fixture
def engine(clock):
    """Engine with a 150 exchange rate on the test clock"""
    return MetricsEngine(EngineConfig(exchange_rate=150.0), clock=clock)


@pytest.fixture
def raw_trade():
    """Trade message as the interceptor delivers it."""
    return {
        "price_usd": "0.002",
        "total_usd": "125.5",
        "pair_address": "PairAddr111",
        "signature": "sig-1",
        "type": "buy",
        "maker_address": "Maker111",
        "liquidity_sol": "84.2",
        "liquidity_token": 123456789,
        "timestamp": T0,
    }
