"""Logging setup for armkin entry points.

Library modules only call ``logging.getLogger(__name__)``; the CLI (or a
notebook) calls :func:`setup_logging` once to attach handlers.

    from armkin.utils.logging_config import setup_logging

    setup_logging()                              # INFO to stderr
    setup_logging(debug=True)                    # per-target IK misses too
    setup_logging(log_file="runs/search.log")    # stderr + rotating file

The level falls back to ``ARMKIN_LOG_LEVEL`` (a level name such as
``WARNING``) when neither ``debug`` nor ``level`` is given.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LEVEL_ENV_VAR = "ARMKIN_LOG_LEVEL"

# Link-length searches can log a line per candidate at DEBUG
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3


def resolve_level(debug: bool = False, level: int | str | None = None) -> int:
    """Pick the effective log level.

    Order: ``debug`` flag, explicit ``level``, ``ARMKIN_LOG_LEVEL``, INFO.
    """
    if debug:
        return logging.DEBUG
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR)
    if level is None or level == "":
        return logging.INFO
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level {level!r}")
    return resolved


def rotating_file_handler(
    path: str | Path,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
) -> RotatingFileHandler:
    """Size-capped file handler; creates the parent directory."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)


def setup_logging(
    debug: bool = False,
    log_file: str | Path | None = None,
    *,
    level: int | str | None = None,
    fmt: str = DEFAULT_FORMAT,
    max_bytes: int = MAX_BYTES,
    backup_count: int = BACKUP_COUNT,
) -> None:
    """Configure the root logger with stderr and optional file output.

    Does nothing when the root logger already has handlers (basicConfig
    semantics), so a host application's own setup wins.
    """
    if logging.getLogger().handlers:
        return

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(rotating_file_handler(log_file, max_bytes, backup_count))
    logging.basicConfig(level=resolve_level(debug, level), format=fmt, handlers=handlers)

    if log_file:
        logging.getLogger(__name__).debug("Writing logs to %s", log_file)
