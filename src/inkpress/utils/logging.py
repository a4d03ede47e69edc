"""Logging for the Inkpress CLI and template loader.

Log lines go to stderr so `inkpress render` can own stdout. Three modes:
- human:   [LEVEL] message (colored on a TTY)
- verbose: [LEVEL][HH:MM:SS] message, debug level
- json:    one object per line; render failures add "key" and "error"
"""

import json
import logging
import sys
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TextIO

ROOT_LOGGER = "inkpress"

RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[90m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[31m",
}


class LogMode(Enum):
    """Logging output mode."""

    HUMAN = "human"
    VERBOSE = "verbose"
    JSON = "json"


class ConsoleFormatter(logging.Formatter):
    """Formats records as ``[LEVEL] message``, optionally with a clock time."""

    def __init__(self, use_colors: bool = False, timestamps: bool = False) -> None:
        super().__init__()
        self.use_colors = use_colors
        self.timestamps = timestamps

    def format(self, record: logging.LogRecord) -> str:
        level = f"[{record.levelname}]"
        if self.use_colors:
            level = f"{LEVEL_COLORS.get(record.levelno, RESET)}{level}{RESET}"
        if self.timestamps:
            level += datetime.fromtimestamp(record.created).strftime("[%H:%M:%S]")
        return f"{level} {record.getMessage()}"


class JSONFormatter(logging.Formatter):
    """Formats records as JSON lines for CI.

    {"level": "ERROR", "ts": "2026-01-31T19:45:23+00:00", "msg": "...", "key": "login.html"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "level": record.levelname,
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "msg": record.getMessage(),
        }
        entry.update(getattr(record, "extra_data", {}))
        return json.dumps(entry, default=str)


class InkpressLogger(logging.Logger):
    """Logger that can attach structured fields to a record."""

    def structured(self, level: int, msg: str, *args: Any, **fields: Any) -> None:
        """Log msg % args; fields only show up in JSON mode."""
        if not self.isEnabledFor(level):
            return
        record = self.makeRecord(self.name, level, "(unknown)", 0, msg, args, None)
        record.extra_data = fields  # type: ignore[attr-defined]
        self.handle(record)


logging.setLoggerClass(InkpressLogger)


def get_logger(name: str = ROOT_LOGGER) -> InkpressLogger:
    """Get a logger under the inkpress hierarchy."""
    return logging.getLogger(name)  # type: ignore[return-value]


def setup_logging(
    mode: LogMode = LogMode.HUMAN,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Replace the inkpress handler with one writing in the given mode.

    Args:
        mode: Output mode
        level: Minimum log level
        stream: Output stream (default: stderr)
    """
    stream = stream or sys.stderr

    if mode is LogMode.JSON:
        formatter: logging.Formatter = JSONFormatter()
    else:
        use_colors = hasattr(stream, "isatty") and stream.isatty()
        formatter = ConsoleFormatter(use_colors=use_colors, timestamps=mode is LogMode.VERBOSE)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)


def configure_from_cli(verbose: bool = False, quiet: bool = False, ci: bool = False) -> None:
    """Map the global CLI flags onto setup_logging.

    --ci selects JSON, --verbose adds timestamps and debug records, --quiet
    keeps warnings and errors only (and wins over --verbose for the level).
    """
    if ci:
        mode = LogMode.JSON
    elif verbose:
        mode = LogMode.VERBOSE
    else:
        mode = LogMode.HUMAN

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    setup_logging(mode=mode, level=level)
