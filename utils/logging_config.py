"""Loguru sinks for the command-line app: console plus a per-run log file."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

LOG_FILE_PREFIX = "palpad"


def configure_logging(logs_dir: Path, level: str = "INFO") -> Path | None:
    """
    Replace loguru's default sink with stderr at ``level`` and, when the
    directory is writable, a per-run file under ``logs_dir``.

    Returns the log file path, or None if only console logging is active.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, enqueue=True)

    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning(f"Logging to console only; cannot create {logs_dir}: {exc}")
        return None

    log_file = logs_dir / f"{LOG_FILE_PREFIX}_{datetime.now():%Y%m%d_%H%M%S}.log"
    # File sink keeps debug detail regardless of console level
    logger.add(log_file, level="DEBUG", rotation="5 MB", retention=5, backtrace=True, enqueue=True)
    logger.debug(f"Writing log file {log_file}")
    return log_file
