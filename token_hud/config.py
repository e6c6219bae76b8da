"""
Engine Configuration Module

Single source of truth for the engine's defaults and thresholds, with an
environment-based loader. Invalid environment values are logged and the
default is kept.
"""

import logging
import math
import os
from dataclasses import dataclass, fields
from typing import Optional, Tuple

import pytz

logger = logging.getLogger(__name__)

ENV_PREFIX = "TOKEN_HUD_"
DEFAULT_TOKEN_SUPPLY = 1_000_000_000.0
PLACEHOLDER = "---"


@dataclass
class EngineConfig:
    """Configuration for a MetricsEngine instance."""

    # Market cap
    default_token_supply: float = DEFAULT_TOKEN_SUPPLY

    # RSI calculation
    rsi_period: int = 14
    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    rsi_history_size: int = 100
    price_history_size: int = 200
    historical_interval_ms: int = 60_000  # Spacing for bare historical prices
    bootstrap_rsi_from_chart: bool = True

    # Volume
    volume_horizon_minutes: int = 24 * 60
    summary_windows_minutes: Tuple[int, int] = (1, 5)

    # Native asset -> USD conversion for pulse values
    exchange_rate: Optional[float] = None

    # Presentation / export
    timezone: str = "UTC"
    placeholder: str = PLACEHOLDER

    def __post_init__(self):
        if self.default_token_supply <= 0 or not math.isfinite(self.default_token_supply):
            raise ValueError("default_token_supply must be a finite positive number")
        for name in (
            "rsi_period",
            "rsi_history_size",
            "price_history_size",
            "historical_interval_ms",
            "volume_horizon_minutes",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.rsi_oversold >= self.rsi_overbought:
            raise ValueError("rsi_oversold must be below rsi_overbought")
        if len(self.summary_windows_minutes) != 2 or min(self.summary_windows_minutes) <= 0:
            raise ValueError("summary_windows_minutes must be two positive window lengths")
        if self.timezone not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {self.timezone}")

    @property
    def tz(self) -> pytz.BaseTzInfo:
        return pytz.timezone(self.timezone)

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "EngineConfig":
        """
        Build a config from environment variables.

        Reads e.g. TOKEN_HUD_RSI_PERIOD, TOKEN_HUD_EXCHANGE_RATE,
        TOKEN_HUD_TIMEZONE. Unset or invalid values keep the default.
        """
        config = cls()
        for f in fields(cls):
            raw = os.getenv(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            current = getattr(config, f.name)
            try:
                value = _convert(raw, current, f.name)
                candidate = cls(**{**config.__dict__, f.name: value})
            except ValueError as e:
                logger.warning(f"Ignoring {prefix}{f.name.upper()}={raw!r}: {e}")
                continue
            config = candidate
        return config


def _convert(raw: str, current, name: str):
    """Convert an environment string to the type of the current value."""
    if name == "exchange_rate":
        rate = float(raw)
        if not math.isfinite(rate) or rate <= 0:
            raise ValueError("exchange rate must be a finite positive number")
        return rate
    if name == "summary_windows_minutes":
        parts = tuple(int(p) for p in raw.split(",") if p.strip())
        if len(parts) != 2 or min(parts) <= 0:
            raise ValueError("expected two positive integers")
        return parts
    if isinstance(current, bool):
        lowered = raw.strip().lower()
        if lowered not in ("true", "false", "1", "0"):
            raise ValueError("expected a boolean")
        return lowered in ("true", "1")
    if isinstance(current, int):
        return int(raw)
    if isinstance(current, float):
        return float(raw)
    return raw
