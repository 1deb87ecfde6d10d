"""Utility helpers shared across routertree modules."""

from .logging import configure_logging, get_logger, log_timing

__all__ = ["configure_logging", "get_logger", "log_timing"]
