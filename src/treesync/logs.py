"""Logging setup for treesync commands."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from treesync.config.models import LoggingSettings
from treesync.state import LOG_FILENAME

_HANDLER_MARKER = "_treesync_handler"


def configure_logging(settings: LoggingSettings, log_dir: Path | None = None) -> None:
    """Route treesync logs to stderr and, optionally, a rotating log file.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        settings: Logging configuration (level and rotation limits).
        log_dir: Directory receiving ``treesync.log``; no file is written when None.
    """
    level = getattr(logging, settings.level.strip().upper(), logging.WARNING)
    logger = logging.getLogger("treesync")
    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_MARKER, False)]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(min(level, logging.INFO) if log_dir is not None else level)

    console_handler = RichHandler(
        console=Console(stderr=True), show_time=False, show_path=False, rich_tracebacks=False
    )
    console_handler.setLevel(level)
    setattr(console_handler, _HANDLER_MARKER, True)
    logger.addHandler(console_handler)

    if log_dir is None:
        return
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=settings.max_size_mb * 1024 * 1024,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
    file_handler.setLevel(min(level, logging.INFO))
    setattr(file_handler, _HANDLER_MARKER, True)
    logger.addHandler(file_handler)


__all__ = ["configure_logging"]
