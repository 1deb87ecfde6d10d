"""Centralised logging configuration built on loguru."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from loguru import logger

from ..config.settings import Settings, get_settings

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[command]}</cyan> | "
    "{message}"
)


def configure_logging(
    settings: Settings | None = None,
    level: str | None = None,
    *,
    command: str = "-",
) -> None:
    """Initialise loguru sinks according to the active settings.

    *command* is stamped on every record as ``extra[command]``.
    """

    cfg = settings or get_settings()
    resolved_level = level or cfg.log_level
    log_path = cfg.log_file
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(extra={"command": command})
    logger.add(
        sys.stderr,
        level=resolved_level,
        backtrace=False,
        diagnose=False,
        format=_LOG_FORMAT,
    )
    logger.add(
        log_path,
        rotation="10 MB",
        retention="14 days",
        format=_LOG_FORMAT,
        level=resolved_level,
    )


def get_logger(**context: Any):
    """Return a contextualised logger instance."""

    return logger.bind(**context)


@contextmanager
def log_timing(step: str, *, logger_=logger):
    """Helper to log elapsed time for a block."""

    start = perf_counter()
    try:
        yield
    finally:
        logger_.debug("Step timing", step=step, seconds=perf_counter() - start)


__all__ = ["configure_logging", "get_logger", "log_timing"]
