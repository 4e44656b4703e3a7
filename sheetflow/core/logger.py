"""Logging helpers for the sheetflow package."""

# Module responsibilities:
# - Centralize logging configuration with stream + optional rotating file handlers.
# - Provide get_logger() that configures the package root logger exactly once.

from __future__ import annotations

import logging
import logging.handlers
import os
import threading
from pathlib import Path
from typing import Optional

LOG_DIR_ENV = "SHEETFLOW_LOG_DIR"
LOG_LEVEL_ENV = "SHEETFLOW_LOG_LEVEL"
LOG_FILE_NAME = "sheetflow.log"
ROOT_LOGGER_NAME = "sheetflow"

_LOG_CONFIGURED = False
_CONFIG_LOCK = threading.Lock()


def _resolve_log_dir(log_dir: Optional[Path] = None) -> Optional[Path]:
    """Resolve the log directory from the argument or environment, ensuring existence."""
    if log_dir is None:
        env_value = os.environ.get(LOG_DIR_ENV)
        if not env_value:
            return None
        log_dir = Path(env_value).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def resolve_log_level(level: Optional[str] = None) -> int:
    """Resolve a level name from the argument or ``$SHEETFLOW_LOG_LEVEL``; defaults to INFO."""
    name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").strip().upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {name}")
    return resolved


def _configure_logging(log_dir: Optional[Path] = None) -> None:
    """Configure the package logger once with console + optional rotating file handlers."""
    global _LOG_CONFIGURED
    with _CONFIG_LOCK:
        if _LOG_CONFIGURED:
            return

        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        level = resolve_log_level()
        root_logger.setLevel(level)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(logging.WARNING)
        root_logger.addHandler(console_handler)

        directory = _resolve_log_dir(log_dir)
        if directory is not None:
            file_handler = logging.handlers.RotatingFileHandler(
                directory / LOG_FILE_NAME, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(level)
            root_logger.addHandler(file_handler)

        _LOG_CONFIGURED = True


def get_logger(name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """Return a package-scoped logger.

    Args:
        name: Logger name suffix appended to the package root logger namespace.
        log_dir: Optional override for the logging directory. Falls back to
            ``$SHEETFLOW_LOG_DIR``; without either, only the console handler is
            attached. The package level comes from ``$SHEETFLOW_LOG_LEVEL``
            (default ``INFO``); set ``DEBUG`` to see property resolution traces.

    Returns:
        Configured logger scoped under ``sheetflow``.
    """

    _configure_logging(log_dir)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
