"""Logging setup for the command line."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def default_log_file() -> Path:
    """Log file name generated from the current time."""
    return Path(f"terradep_graph_{datetime.now():%Y%m%dT%H%M%S%f}.log")


def configure_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """
    Route terradep logs to stderr, or to ``log_file`` when given.

    Args:
        verbose: Log DEBUG records instead of INFO and above
        log_file: Write plain-text records to this file instead of stderr
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger("terradep")
    logger.setLevel(level)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setLevel(level)
    logger.addHandler(handler)
