"""Logging setup.

The terminal belongs to the UI, so log records go to a rotating file in the
platform log directory. ``NIX_INSPECT_LOG_LEVEL`` overrides the level.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir

from .errors import StartupError

LOGGER_NAME = "nixinspect"
LOG_FILENAME = "nix-inspect.log"
LOG_LEVEL_ENV = "NIX_INSPECT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
MAX_LOG_BYTES = 2_000_000
LOG_BACKUP_COUNT = 3


def default_log_path() -> Path:
    return Path(user_log_dir("nix-inspect", appauthor=False)) / LOG_FILENAME


def _level_from_env(default: int = logging.INFO) -> int:
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def initialize_logging(log_path: Path | None = None) -> Path:
    """Attach a rotating file handler to the package logger and return its path."""
    target = default_log_path() if log_path is None else log_path
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            target,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        raise StartupError(f"could not open log file {target}: {exc}") from exc

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)
    logger.setLevel(_level_from_env())
    logger.propagate = False
    return target


__all__ = ["LOGGER_NAME", "default_log_path", "initialize_logging"]
