"""Package-wide logging setup: a rotating log file and a settable level."""

from __future__ import annotations

import logging
import os
import threading
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "tinylsm"
LOG_FILE_NAME = "tiny_lsm.log"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3

# Level names as accepted by reset_log_level; unknown names switch logging off.
_OFF = logging.CRITICAL + 10
_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "err": logging.ERROR,
    "critical": logging.CRITICAL,
    "off": _OFF,
}

_init_lock = threading.Lock()
_initialized = False


def init_file_logging(log_dir: str | os.PathLike[str] = "logs") -> logging.Logger:
    """Attach a rotating file handler to the package logger, once per process."""
    global _initialized
    logger = logging.getLogger(LOGGER_NAME)
    with _init_lock:
        if _initialized:
            return logger
        os.makedirs(log_dir, exist_ok=True)
        handler = RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE_NAME),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter("[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s")
        )
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        _initialized = True
    logger.info("logging initialized")
    return logger


def reset_log_level(level: str) -> int:
    """Set the package logger's level by name and return the numeric level."""
    numeric = _LEVELS.get(level.lower(), _OFF)
    logging.getLogger(LOGGER_NAME).setLevel(numeric)
    return numeric