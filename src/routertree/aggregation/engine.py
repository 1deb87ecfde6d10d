"""Aggregation of metric snapshots into the router hierarchy.

Seeding runs once per tree and creates routers and servers. Every later
snapshot goes through :meth:`AggregationEngine.update`, which first discovers
new destinations, notifies, and only then attributes each sample to its most
specific owning scope. Discovery must finish before attribution so samples of a
destination created in the same batch land on the destination rather than on
its router.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, MutableMapping

from routertree.config.policies import TreePolicy
from routertree.entities.builder import build_destination, build_router, build_server
from routertree.entities.core import Destination, Router, Server
from routertree.keys import parse_destination_key, parse_server_key
from routertree.observability.registry import CounterRegistry
from routertree.utils.logging import get_logger

from .resolution import find_by_metric_key

Snapshot = Mapping[str, Any]
RouterMap = MutableMapping[str, Router]
DiscoveryCallback = Callable[[List[Destination]], None]


@dataclass
class AttributionResult:
    """Outcome of one attribution pass."""

    attributed: int = 0
    dropped: int = 0
    dropped_keys: List[str] = field(default_factory=list)


@dataclass
class UpdateResult:
    """Outcome of a full discovery plus attribution update."""

    added: List[Destination]
    attributed: int
    dropped: int


class AggregationEngine:
    """Stateless over the tree; every call receives the router mapping to mutate."""

    def __init__(
        self,
        *,
        policy: TreePolicy | None = None,
        registry: CounterRegistry | None = None,
    ) -> None:
        self._policy = policy or TreePolicy()
        self._registry: CounterRegistry | None = None
        if self._policy.counters_enabled:
            self._registry = registry or CounterRegistry()
        self._log = get_logger(module=__name__)

    @property
    def policy(self) -> TreePolicy:
        return self._policy

    @property
    def registry(self) -> CounterRegistry | None:
        return self._registry

    def _count(self, phase: str, values: Mapping[str, int]) -> None:
        if self._registry is not None:
            self._registry.bulk_update(values, phase=phase)

    def seed_servers(self, routers: RouterMap, snapshot: Snapshot) -> List[Server]:
        """Create routers and append one server per server discovery key.

        Servers are appended unconditionally; repeated keys yield repeated
        entries.
        """

        added: List[Server] = []
        routers_added = 0
        for key in snapshot:
            parsed = parse_server_key(key)
            if parsed is None:
                continue
            router = routers.get(parsed.router)
            if router is None:
                router = routers[parsed.router] = build_router(parsed.router)
                routers_added += 1
            server = build_server(parsed.router, parsed.ip, parsed.port)
            router.servers.append(server)
            added.append(server)

        self._count(
            "Servers",
            {"keys_in": len(snapshot), "routers_added": routers_added, "servers_added": len(added)},
        )
        if added:
            self._log.debug(
                "Seeded servers",
                routers=routers_added,
                servers=[f"{server.router}:{server.label}" for server in added[: self._policy.max_logged_keys]],
            )
        return added

    def discover_destinations(self, routers: RouterMap, snapshot: Snapshot) -> List[Destination]:
        """Insert a destination for every unseen id of an existing router."""

        added: List[Destination] = []
        matched = 0
        unknown = 0
        for key in snapshot:
            parsed = parse_destination_key(key)
            if parsed is None:
                continue
            matched += 1
            router = routers.get(parsed.router)
            if router is None:
                unknown += 1
                continue
            if parsed.id in router.destinations:
                continue
            destination = build_destination(parsed.router, parsed.id)
            router.destinations[parsed.id] = destination
            added.append(destination)

        self._count(
            "Discovery",
            {"keys_matched": matched, "destinations_added": len(added), "unknown_router": unknown},
        )
        if added:
            self._log.debug(
                "Discovered destinations",
                count=len(added),
                destinations=[
                    f"{destination.router}:{destination.label}"
                    for destination in added[: self._policy.max_logged_keys]
                ],
            )
        return added

    def attribute(self, routers: Mapping[str, Router], snapshot: Snapshot) -> AttributionResult:
        """Store every sample on its most specific scope under its local name."""

        result = AttributionResult()
        for key, value in snapshot.items():
            scope = find_by_metric_key(routers, key)
            if scope is None:
                result.dropped += 1
                if len(result.dropped_keys) < self._policy.max_logged_keys:
                    result.dropped_keys.append(str(key))
                continue
            scope.metrics[scope.local_name(key)] = value
            result.attributed += 1
            if self._registry is not None:
                self._registry.increment("by_kind", phase="Attribution", label=scope.kind)

        self._count(
            "Attribution",
            {"keys_in": len(snapshot), "attributed": result.attributed, "dropped": result.dropped},
        )
        if result.dropped and self._policy.log_dropped_keys:
            self._log.debug("Dropped unattributed keys", count=result.dropped, keys=result.dropped_keys)
        return result

    def update(
        self,
        routers: RouterMap,
        snapshot: Snapshot,
        notify: DiscoveryCallback | None = None,
    ) -> UpdateResult:
        """Run discovery, notify once about new destinations, then attribute.

        *notify* runs before attribution, so it observes new destinations with
        empty metric tables.
        """

        added = self.discover_destinations(routers, snapshot)
        if added and notify is not None:
            self._count("Discovery", {"notifications": 1})
            notify(list(added))
        attribution = self.attribute(routers, snapshot)
        return UpdateResult(
            added=added,
            attributed=attribution.attributed,
            dropped=attribution.dropped,
        )


def seed_servers(routers: RouterMap, snapshot: Snapshot) -> List[Server]:
    """Seed servers with a default engine."""

    return AggregationEngine().seed_servers(routers, snapshot)


def update(
    routers: RouterMap,
    snapshot: Snapshot,
    notify: DiscoveryCallback | None = None,
) -> UpdateResult:
    """Update *routers* from *snapshot* with a default engine."""

    return AggregationEngine().update(routers, snapshot, notify)


__all__ = [
    "AggregationEngine",
    "AttributionResult",
    "UpdateResult",
    "seed_servers",
    "update",
]
