"""
Logging setup for the marketplace API.

``setup_logging`` attaches handlers to the ``auto_services_api`` logger,
the parent of every module logger in the package, so records from the
services (registrations, bookings, status changes, policy denials) share
one format whether the app runs under uvicorn, pytest or a script.
Records still propagate, so a host that configures the root logger sees
them too.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "auto_services_api"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_MAX_BYTES = 5 * 1024 * 1024
_BACKUPS = 3


def _has_handler(logger: logging.Logger, kind: type, target: Optional[str] = None) -> bool:
    for handler in logger.handlers:
        if type(handler) is not kind:
            continue
        if target is None or getattr(handler, "baseFilename", None) == target:
            return True
    return False


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> logging.Logger:
    """Configure the package logger and return it.

    Safe to call repeatedly: a console handler, and a file handler per
    distinct ``logfile``, are only added once.

    Parameters
    ----------
    level : str
        Level name such as ``"DEBUG"`` or ``"info"``.  Unknown names
        fall back to INFO.
    logfile : Optional[str]
        When given, records are also written to this file, rotated at
        5 MB with three backups.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if not _has_handler(logger, logging.StreamHandler):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    if logfile:
        path = Path(logfile).resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        if not _has_handler(logger, RotatingFileHandler, str(path)):
            file_handler = RotatingFileHandler(path, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
