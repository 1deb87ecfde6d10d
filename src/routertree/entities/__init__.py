"""Domain entities for the router hierarchy."""

from .builder import build_destination, build_router, build_server
from .core import (
    PALETTE,
    AnyScope,
    Destination,
    Router,
    Scope,
    Server,
    color_for,
)

__all__ = [
    "PALETTE",
    "AnyScope",
    "Scope",
    "Router",
    "Server",
    "Destination",
    "color_for",
    "build_router",
    "build_server",
    "build_destination",
]
