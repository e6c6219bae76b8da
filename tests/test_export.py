"""Tests for DataFrame / CSV / JSON export of the transaction log and chart bars."""

import json

import pandas as pd
import pytest

from token_hud import EngineConfig, MetricsEngine
from token_hud.export import (
    CHART_BAR_COLUMNS,
    TRANSACTION_COLUMNS,
    chart_bars_frame,
    export_engine,
    to_csv,
    to_json,
    transactions_frame,
)

from conftest import T0


@pytest.fixture
def loaded_engine(clock, raw_trade):
    """Engine with two trades and two chart bars in New York time"""
    engine = MetricsEngine(EngineConfig(timezone="America/New_York", rsi_period=2), clock=clock)
    engine.ingest(raw_trade)
    engine.ingest({**raw_trade, "price_usd": "0.003", "signature": "sig-2", "timestamp": T0 + 1000})
    engine.ingest([
        {"time": T0 + 60_000, "open": 1, "high": 2, "low": 1, "close": 1.5},
        {"time": T0, "open": 1, "high": 1, "low": 1, "close": 1},
    ])
    return engine


class TestFrames:
    """Tests for DataFrame construction"""

    def test_transactions_frame(self, loaded_engine):
        """Test columns, order and timezone of the transactions frame"""
        df = transactions_frame(loaded_engine.export_transactions(), "America/New_York")

        assert list(df.columns) == ["datetime"] + TRANSACTION_COLUMNS
        assert len(df) == 2
        assert df["signature"].tolist() == ["sig-1", "sig-2"]
        assert str(df["datetime"].dt.tz) == "America/New_York"
        assert df["datetime"].iloc[0] == pd.Timestamp(T0, unit="ms", tz="UTC")

    def test_empty_transactions_frame(self):
        """Test that an empty log still has the full column set"""
        df = transactions_frame([])
        assert df.empty
        assert list(df.columns) == ["datetime"] + TRANSACTION_COLUMNS

    def test_chart_frame_sorted(self):
        """Test that chart rows are sorted by time"""
        df = chart_bars_frame([
            {"time": 20, "open": 1, "high": 1, "low": 1, "close": 1, "volume": 0},
            {"time": 10, "open": 2, "high": 2, "low": 2, "close": 2, "volume": 0},
        ])

        assert list(df.columns) == ["datetime"] + CHART_BAR_COLUMNS
        assert df["time"].tolist() == [10, 20]


class TestSerialization:
    """Tests for CSV and JSON output"""

    def test_csv_text(self, loaded_engine):
        """Test the CSV header and row count"""
        text = to_csv(transactions_frame(loaded_engine.export_transactions()))
        header = text.splitlines()[0]
        assert header.startswith("datetime,timestamp_ms,price_usd")
        assert len(text.splitlines()) == 3

    def test_json_indent(self):
        """Test two-space JSON indentation"""
        text = to_json([{"time": 1}])
        assert text == '[\n  {\n    "time": 1\n  }\n]'

    def test_export_engine_writes_files(self, loaded_engine, tmp_path):
        """Test that every export file is written and readable"""
        paths = export_engine(loaded_engine, str(tmp_path), prefix="pair")

        assert set(paths) == {
            "transactions_csv",
            "transactions_json",
            "chart_csv",
            "chart_json",
            "rsi_json",
        }
        chart = json.loads((tmp_path / "pair_chart.json").read_text())
        assert [bar["time"] for bar in chart] == [T0, T0 + 60_000]

        transactions = pd.read_csv(paths["transactions_csv"])
        assert len(transactions) == 2

        rsi = json.loads((tmp_path / "pair_rsi.json").read_text())
        assert rsi["config"]["period"] == 2
        assert len(rsi["price_history"]) == 2
