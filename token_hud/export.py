"""
Export of the transaction log and chart bars.

Tabular output goes through pandas (DataFrame / CSV); hierarchical output
is pretty-printed JSON. Timestamps are kept as epoch milliseconds and, in
tabular form, also rendered in the configured timezone.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import pytz

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = [
    "timestamp_ms",
    "price_usd",
    "total_usd",
    "market_cap_usd",
    "token_supply",
    "pair_address",
    "signature",
    "side",
    "maker_address",
    "liquidity_native",
    "liquidity_token",
]

CHART_BAR_COLUMNS = ["time", "open", "high", "low", "close", "volume"]


def _with_datetime(df: pd.DataFrame, ms_column: str, timezone: str) -> pd.DataFrame:
    tz = pytz.timezone(timezone)
    df.insert(
        0,
        "datetime",
        pd.to_datetime(df[ms_column], unit="ms", utc=True).dt.tz_convert(tz),
    )
    return df


def transactions_frame(records: List[Dict[str, Any]], timezone: str = "UTC") -> pd.DataFrame:
    """Transaction log as a DataFrame, one row per trade in log order."""
    df = pd.DataFrame(records, columns=TRANSACTION_COLUMNS)
    return _with_datetime(df, "timestamp_ms", timezone)


def chart_bars_frame(bars: List[Dict[str, Any]], timezone: str = "UTC") -> pd.DataFrame:
    """Chart bars as a DataFrame sorted by time."""
    df = pd.DataFrame(bars, columns=CHART_BAR_COLUMNS)
    df = df.sort_values("time", kind="stable").reset_index(drop=True)
    return _with_datetime(df, "time", timezone)


def to_csv(df: pd.DataFrame, path: Optional[str] = None) -> Optional[str]:
    """Write CSV to path, or return it as text when no path is given."""
    if path is None:
        return df.to_csv(index=False)
    df.to_csv(path, index=False)
    logger.info(f"Exported {len(df)} row(s) to {path}")
    return None


def to_json(rows: List[Dict[str, Any]], path: Optional[str] = None) -> str:
    """Pretty-printed JSON (indent 2); also written to path when given."""
    text = json.dumps(rows, indent=2)
    if path is not None:
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)
        logger.info(f"Exported {len(rows)} record(s) to {path}")
    return text


def export_engine(engine, directory: str, prefix: str = "token") -> Dict[str, str]:
    """
    Write transactions and chart bars (CSV and JSON) plus RSI data (JSON).

    Returns:
        Mapping of export name -> file path
    """
    out = Path(directory)
    out.mkdir(parents=True, exist_ok=True)
    timezone = engine.config.timezone
    transactions = engine.export_transactions()
    bars = engine.export_chart_bars()

    paths = {
        "transactions_csv": str(out / f"{prefix}_transactions.csv"),
        "transactions_json": str(out / f"{prefix}_transactions.json"),
        "chart_csv": str(out / f"{prefix}_chart.csv"),
        "chart_json": str(out / f"{prefix}_chart.json"),
        "rsi_json": str(out / f"{prefix}_rsi.json"),
    }
    to_csv(transactions_frame(transactions, timezone), paths["transactions_csv"])
    to_json(transactions, paths["transactions_json"])
    to_csv(chart_bars_frame(bars, timezone), paths["chart_csv"])
    to_json(bars, paths["chart_json"])
    with open(paths["rsi_json"], "w", encoding="utf-8") as fh:
        json.dump(engine.store.rsi.export_data(), fh, indent=2)
    return paths
