"""Router hierarchy reconstruction from flat telemetry metric keys."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("routertree")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.1.0"

from .aggregation import AggregationEngine, UpdateResult
from .config.policies import Policies, TreePolicy
from .config.settings import Settings, get_settings
from .entities import (
    PALETTE,
    AnyScope,
    Destination,
    Router,
    Scope,
    Server,
    build_destination,
    build_router,
    build_server,
    color_for,
)
from .keys import DestinationKey, ServerKey, classify_key, parse_destination_key, parse_server_key
from .tree import RouterTree

__all__ = [
    "__version__",
    "RouterTree",
    "AggregationEngine",
    "UpdateResult",
    "Settings",
    "get_settings",
    "Policies",
    "TreePolicy",
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
    "ServerKey",
    "DestinationKey",
    "parse_server_key",
    "parse_destination_key",
    "classify_key",
]
