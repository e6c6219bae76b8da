#!/usr/bin/env python3
"""
Replay Runner

Feeds captured interceptor messages (one JSON document per line) through a
MetricsEngine, then prints the token stats block and optionally exports
the transaction log, chart bars and RSI data.

Usage:
    python -m token_hud.replay capture.jsonl
    python -m token_hud.replay capture.jsonl --exchange-rate 150 --export out/
    python -m token_hud.replay capture.jsonl --quiet
"""

import argparse
import logging
import sys
from typing import Iterable, Optional

from .config import EngineConfig
from .display.colors import Colors
from .display.printers import print_summary
from .engine import MetricsEngine
from .export import export_engine
from .logging_config import configure_default_logging

logger = logging.getLogger(__name__)


def replay(engine: MetricsEngine, lines: Iterable[str]) -> int:
    """
    Ingest every non-blank line.

    Returns:
        Number of messages that changed engine state
    """
    applied = 0
    for line_no, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        if engine.ingest(line):
            applied += 1
        else:
            logger.debug(f"Line {line_no} not applied")
    return applied


def run(
    path: str,
    exchange_rate: Optional[float] = None,
    export_dir: Optional[str] = None,
    quiet: bool = False,
) -> MetricsEngine:
    config = EngineConfig.from_env()
    engine = MetricsEngine(config)
    if exchange_rate is not None:
        engine.set_exchange_rate(exchange_rate)

    with open(path, encoding="utf-8") as fh:
        applied = replay(engine, fh)

    stats = engine.stats
    logger.info(
        f"Replayed {path}: {applied} applied, {stats.rejected} rejected, "
        f"{stats.undecodable} undecodable"
    )

    if not quiet:
        print_summary(engine.summary(), color=sys.stdout.isatty())

    if export_dir:
        paths = export_engine(engine, export_dir)
        if not quiet:
            for name, file_path in paths.items():
                print(f"  {name}: {file_path}")
    return engine


def main():
    parser = argparse.ArgumentParser(description="Replay captured market messages through the metrics engine")
    parser.add_argument("capture", help="JSON-lines file of raw messages")
    parser.add_argument(
        "--exchange-rate", "-r", type=float, default=None, help="Native asset price in USD"
    )
    parser.add_argument(
        "--export", "-e", dest="export_dir", default=None, help="Directory for CSV/JSON exports"
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="No summary output")

    args = parser.parse_args()
    configure_default_logging()

    try:
        run(args.capture, exchange_rate=args.exchange_rate, export_dir=args.export_dir, quiet=args.quiet)
    except FileNotFoundError as e:
        print(f"{Colors.RED}Error: {e}{Colors.RESET}")
        sys.exit(1)


if __name__ == "__main__":
    main()
