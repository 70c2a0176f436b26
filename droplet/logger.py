"""Logging setup for droplet.

Modules log through ``logging.getLogger(__name__)``; this module only
attaches handlers to the package logger.  Log files live next to the
settings file:

    ~/Library/Application Support/Droplet/logs/droplet.log
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

from .settings import APP_SUPPORT_DIR

LOG_DIR = APP_SUPPORT_DIR / "logs"
LOG_FILE = "droplet.log"
_MAX_BYTES = 1024 * 1024  # 1 MB
_BACKUP_COUNT = 3
_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"

PACKAGE_LOGGER = "droplet"


def configure_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | None = None,
    console: bool = True,
) -> logging.Logger:
    """Attach a rotating file handler (and optionally stderr) to the
    ``droplet`` logger.  Safe to call more than once."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    directory = log_dir or LOG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            directory / LOG_FILE,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError:
        # Read-only home: keep going with stderr only
        console = True
    else:
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    return logger
