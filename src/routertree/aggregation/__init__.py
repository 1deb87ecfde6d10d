"""Discovery, attribution and scope resolution over a router mapping."""

from .engine import AggregationEngine, AttributionResult, UpdateResult, seed_servers, update
from .resolution import (
    find_by_metric_key,
    find_matching_destination,
    find_matching_router,
    find_matching_server,
)

__all__ = [
    "AggregationEngine",
    "AttributionResult",
    "UpdateResult",
    "seed_servers",
    "update",
    "find_by_metric_key",
    "find_matching_router",
    "find_matching_server",
    "find_matching_destination",
]
