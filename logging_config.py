"""Logging configuration for the painter entry points.

Format:
    2026-10-19T13:45:12.345Z | DEBUG    | session | execute 'point 1 1'

Idempotent: repeated setup_logging() calls don't duplicate handlers.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Optional

_configured = False


class PainterFormatter(logging.Formatter):
    """Human-readable single-line formatter with optional level colours."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        ts_str = ts.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"
        line = f"{ts_str} | {level} | {record.name} | {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(log_level: str = "WARNING", log_file: Optional[str] = None, color: bool = True) -> None:
    """Configures the root logger once; later calls only adjust the level."""
    global _configured

    root = logging.getLogger()
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {log_level}")
    root.setLevel(level)
    if _configured:
        return

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(PainterFormatter(use_color=color))
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(PainterFormatter(use_color=False))
        root.addHandler(file_handler)

    # Pillow logs every plugin it imports at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)
    _configured = True
