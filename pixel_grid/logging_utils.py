from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from version import is_dev_build  # type: ignore

LOGGER_NAME = "PixelGrid"
_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or a child logger for ``component``."""
    if not component:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{component}")


def resolve_log_level(debug_enabled: bool) -> int:
    """Return DEBUG for developer builds and INFO otherwise."""
    return logging.DEBUG if debug_enabled else logging.INFO


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / filename
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def configure_logging(
    *,
    debug_enabled: Optional[bool] = None,
    log_dir: Optional[Path] = None,
    retention: int = 5,
) -> logging.Logger:
    """Set the package log level and optionally attach a rotating log file."""
    logger = get_logger()
    if debug_enabled is None:
        debug_enabled = is_dev_build()
    logger.setLevel(resolve_log_level(debug_enabled))
    if log_dir is not None:
        handler = build_rotating_file_handler(
            log_dir,
            "pixel_grid.log",
            retention=retention,
            formatter=logging.Formatter(_DEFAULT_FORMAT),
        )
        logger.addHandler(handler)
    return logger
