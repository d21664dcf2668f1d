"""Logging setup. The TUI owns the terminal, so records go to a debug file."""

from __future__ import annotations

import logging
from pathlib import Path

from juice_cashier.config import LOG_LEVEL, LOG_PATH

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "juice_cashier"


def setup_logging(log_path: Path = LOG_PATH, level: str = LOG_LEVEL) -> logging.Logger:
    """Configure the package logger once and return it."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, level, logging.INFO))

    # Avoid duplicate file handlers when called twice (tests, re-entry).
    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
        except OSError:
            # Logging must never interfere with app flow.
            handler = logging.NullHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    base = logging.getLogger(ROOT_LOGGER_NAME)
    if not name:
        return base
    if name == ROOT_LOGGER_NAME:
        return base
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = name[len(ROOT_LOGGER_NAME) + 1 :]
    return base.getChild(name)
