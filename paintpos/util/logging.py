"""Centralized logging for the paint center application.

Usage:
    from paintpos.util.logging import get_logger
    logger = get_logger(__name__)

Environment variables:
    PAINTPOS_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Default: INFO
"""

import logging
import os
import sys

DEFAULT_LOG_LEVEL = logging.INFO
LOG_LEVEL_ENV = "PAINTPOS_LOG_LEVEL"
ROOT_LOGGER_NAME = "paintpos"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def level_from_name(name: str | None, default: int = DEFAULT_LOG_LEVEL) -> int:
    return _LEVELS.get((name or "").upper(), default)


def effective_level(configured: str | None) -> int:
    """Level to run with: PAINTPOS_LOG_LEVEL when set, else the configured name."""
    return level_from_name(os.environ.get(LOG_LEVEL_ENV) or configured)


def configure_logging(level: int | None = None) -> None:
    """Attach a stderr handler to the ``paintpos`` logger (only once).

    Args:
        level: Log level to use. If None, reads PAINTPOS_LOG_LEVEL or uses INFO.
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = level_from_name(os.environ.get(LOG_LEVEL_ENV))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``paintpos`` namespace.

    Module names that already start with ``paintpos.`` are used as they are.
    """
    configure_logging()
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_log_level(level: int) -> None:
    """Change the log level at runtime (format switches with DEBUG)."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT))
