"""
Logging setup for the token metrics engine.

Every module logs through `logging.getLogger(__name__)`, so all records
land under the `token_hud` namespace. This module attaches handlers to
that namespace:
- colored console output (level name tinted)
- optional size-rotated log file
- optional one-JSON-object-per-line format for log shippers

Environment variables (read by configure_default_logging):
    LOG_LEVEL    DEBUG / INFO / WARNING / ERROR (default INFO)
    LOG_FILE     path of the log file (default: no file)
    LOG_JSON     "true" for JSON lines
    LOG_CONSOLE  "false" to silence the console
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "token_hud"

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5


class ColoredFormatter(logging.Formatter):
    """Text formatter that tints the level name for terminals."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JsonFormatter(logging.Formatter):
    """One JSON object per record; message text is escaped properly."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _formatter(json_format: bool, colored: bool) -> logging.Formatter:
    if json_format:
        return JsonFormatter()
    if colored:
        return ColoredFormatter(TEXT_FORMAT, DATE_FORMAT)
    return logging.Formatter(TEXT_FORMAT, DATE_FORMAT)


def _file_handler(log_file: str, max_bytes: int, backup_count: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    if max_bytes > 0:
        return logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    return logging.FileHandler(path, encoding="utf-8")


def setup_logging(
    name: str = ROOT_LOGGER,
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    json_format: bool = False,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> logging.Logger:
    """
    Attach handlers to a logger namespace, replacing any it already has.

    Args:
        name: Logger namespace (default: the whole engine)
        level: Level name; unknown names fall back to INFO
        log_file: Optional log file path (parent dirs are created)
        console: Log to stdout
        json_format: JSON lines instead of text
        max_bytes: Rotate the file at this size; 0 disables rotation
        backup_count: Rotated files to keep

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        stream = logging.StreamHandler(sys.stdout)
        stream.setFormatter(_formatter(json_format, colored=sys.stdout.isatty()))
        logger.addHandler(stream)

    if log_file:
        file_handler = _file_handler(log_file, max_bytes, backup_count)
        file_handler.setFormatter(_formatter(json_format, colored=False))
        logger.addHandler(file_handler)

    # Handlers live on the namespace; don't double-print through the root
    logger.propagate = not logger.handlers
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger inside the engine namespace, e.g. get_logger("replay")."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_default_logging() -> logging.Logger:
    """Configure the engine namespace from LOG_* environment variables."""
    level = os.getenv("LOG_LEVEL", "INFO")
    log_file = os.getenv("LOG_FILE") or None
    json_format = os.getenv("LOG_JSON", "false").lower() == "true"
    console = os.getenv("LOG_CONSOLE", "true").lower() != "false"

    logger = setup_logging(
        level=level,
        log_file=log_file,
        console=console,
        json_format=json_format,
    )
    logger.debug(f"Logging configured (level={level}, file={log_file}, json={json_format})")
    return logger
