"""
Pippin Machine — Logging Setup

Console output goes through rich's RichHandler (WARNING+ by default);
a plain-text file log capturing DEBUG+ is added when a log file or log
directory is requested. Library modules only ever call
logging.getLogger(__name__) — handlers are attached here, by the CLI or
by a host application.
"""

from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

from . import config


def setup_logging(
    name: str = config.LOGGER_NAME,
    level: int = config.LOG_LEVEL,
    console_level: int = config.CONSOLE_LOG_LEVEL,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Path] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Log files: ``log_file`` if given, else ``<log_dir>/<name>_YYYYMMDD_HHMMSS.log``
    when ``log_dir`` is given, else no file at all.

    Calling it again on an already configured logger returns it unchanged.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(level)

    # ── Console handler: only important stuff (WARNING+ default) ──
    ch = RichHandler(
        level=console_level,
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(ch)

    # ── File handler: captures everything (DEBUG+) ──
    if log_file is None and log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{name}_{ts}.log"

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(config.FILE_LOG_FORMAT, datefmt=config.FILE_LOG_DATEFMT))
        logger.addHandler(fh)
        logger.info("Logger initialized: %s (file %s)", name, log_path)

    return logger


def reset_logging(name: str = config.LOGGER_NAME):
    """Detach and close all handlers (tests, or re-configuring from a CLI)."""
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
