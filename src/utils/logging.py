"""Logging configuration for the scheduler, API and Dagster code locations."""

import logging
import os
import sys
from collections.abc import Iterable

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that would otherwise attach their own handlers
_PROPAGATING_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "dagster")

# Chatty libraries never logged below INFO
_QUIET_LOGGERS = ("urllib3", "httpx", "sqlalchemy.engine")


def _parse_level(level: str) -> int:
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    return numeric_level


def _set_logger_levels(names: Iterable[str], level: int) -> None:
    for name in names:
        logging.getLogger(name).setLevel(level)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() == "true"


def configure_logging() -> None:
    """Send all application logs to a single stdout handler.

    Env vars:
      - LOG_LEVEL: DEBUG/INFO/WARNING/ERROR/CRITICAL (default INFO)
      - LOG_UVICORN_ACCESS: true/false (default false)

    :raises ValueError: If LOG_LEVEL is not a known level name.
    """
    level_name = os.environ.get("LOG_LEVEL", "INFO")
    level = _parse_level(level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)

    for name in _PROPAGATING_LOGGERS:
        lib_logger = logging.getLogger(name)
        lib_logger.handlers.clear()
        lib_logger.propagate = True

    if not _env_flag("LOG_UVICORN_ACCESS"):
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _set_logger_levels(_QUIET_LOGGERS, level=max(level, logging.INFO))

    logging.getLogger(__name__).info(f"Logging configured: level={level_name.upper()}")
