"""
Logging setup for doorflow_sync.

The CLI calls setup_logging() once per invocation with the resolved
AppConfig values. Everything below the ``doorflow_sync`` logger goes to
two places:

- stderr, at the configured level, colored with click when the stream is
  a terminal
- one file per day in the log directory, always at DEBUG

Old daily files are pruned by cleanup_old_logs() using
``log_retention_count``.
"""

import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import IO, Optional

import click

LOGGER_NAME = "doorflow_sync"

# Daily log files are named doorflow_sync_YYYYMMDD.log
LOG_FILE_PREFIX = "doorflow_sync_"

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
DETAILED_FORMAT = (
    "%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d] %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LEVEL_COLORS = {
    logging.DEBUG: "cyan",
    logging.INFO: "green",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "magenta",
}


def level_from_name(name: Optional[str]) -> int:
    """Map a level name such as ``"warning"`` to its logging constant.

    Unknown or empty names fall back to INFO.
    """
    return LOG_LEVELS.get((name or "").strip().upper(), logging.INFO)


def log_file_for(log_dir: Path, day: Optional[date] = None) -> Path:
    """Path of the daily log file for ``day`` (default: today)."""
    day = day or date.today()
    return log_dir / f"{LOG_FILE_PREFIX}{day:%Y%m%d}.log"


def _wants_color(stream: IO[str]) -> bool:
    if not getattr(stream, "isatty", None) or not stream.isatty():
        return False
    # https://no-color.org/
    if os.environ.get("NO_COLOR"):
        return False
    return os.environ.get("TERM", "") != "dumb"


class ConsoleFormatter(logging.Formatter):
    """Formatter for stderr that colors whole lines by level."""

    def __init__(self, verbose: bool = False, color: bool = False):
        super().__init__(DETAILED_FORMAT if verbose else CONSOLE_FORMAT, DATE_FORMAT)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if self.color:
            return click.style(text, fg=LEVEL_COLORS.get(record.levelno))
        return text


def setup_logging(
    log_dir: Optional[Path],
    level: str | int = "INFO",
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Attach console and file handlers to the ``doorflow_sync`` logger.

    Calling it again replaces the handlers from the previous call.

    Args:
        log_dir: Directory for the daily log file, or None for console only
        level: Console level, as a name or logging constant
        verbose: Log DEBUG to the console with source locations
        stream: Console stream (default: sys.stderr)

    Returns:
        The ``doorflow_sync`` logger
    """
    if isinstance(level, str):
        level = level_from_name(level)
    console_level = logging.DEBUG if verbose else level
    stream = stream or sys.stderr

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    console = logging.StreamHandler(stream)
    console.setLevel(console_level)
    console.setFormatter(ConsoleFormatter(verbose, color=_wants_color(stream)))
    logger.addHandler(console)
    logger.setLevel(console_level)

    if log_dir is not None:
        path = log_file_for(log_dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not open log file {path}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, DATE_FORMAT))
            logger.addHandler(file_handler)
            logger.setLevel(logging.DEBUG)
            logger.debug(f"Log file: {path}")

    return logger


def cleanup_old_logs(log_dir: Path, keep_count: int) -> list[Path]:
    """
    Delete all but the newest ``keep_count`` daily log files.

    Files not named like daily logs are left alone.

    Returns:
        Paths that were removed
    """
    if keep_count <= 0 or not log_dir.is_dir():
        return []

    daily_logs = sorted(
        log_dir.glob(f"{LOG_FILE_PREFIX}*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    removed = []
    for path in daily_logs[keep_count:]:
        try:
            path.unlink()
        except OSError as e:
            logging.getLogger(__name__).debug(f"Could not remove {path}: {e}")
            continue
        removed.append(path)
    return removed


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``doorflow_sync`` hierarchy for ``name``."""
    if name != LOGGER_NAME and not name.startswith(f"{LOGGER_NAME}."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


__all__ = [
    "setup_logging",
    "cleanup_old_logs",
    "get_logger",
    "level_from_name",
    "log_file_for",
    "ConsoleFormatter",
    "LOG_LEVELS",
]
