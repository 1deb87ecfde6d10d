"""Long-lived handle over a router hierarchy built from metric snapshots."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List

from routertree.aggregation.engine import (
    AggregationEngine,
    DiscoveryCallback,
    Snapshot,
    UpdateResult,
)
from routertree.aggregation.resolution import find_by_metric_key, find_matching_router
from routertree.config.policies import TreePolicy
from routertree.entities.core import AnyScope, Destination, Router, Server
from routertree.observability.registry import CounterRegistry
from routertree.utils.logging import get_logger

_LOGGER = get_logger(module=__name__)


class RouterTree:
    """Router hierarchy seeded from an initial snapshot and updated in place.

    Servers are discovered only from the initial snapshot. Destinations and
    metric tables are refreshed by every :meth:`update`. Entities are never
    removed. The tree performs no locking; callers serialise updates.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        *,
        policy: TreePolicy | None = None,
        registry: CounterRegistry | None = None,
    ) -> None:
        self._policy = policy or TreePolicy()
        self._engine = AggregationEngine(policy=self._policy, registry=registry)
        self._routers: Dict[str, Router] = {}
        self._listeners: List[DiscoveryCallback] = []
        self._engine.seed_servers(self._routers, snapshot)
        self._engine.update(self._routers, snapshot, self._dispatch)

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------
    def __contains__(self, router_name: object) -> bool:
        return router_name in self._routers

    def __iter__(self) -> Iterator[Router]:
        return iter(list(self._routers.values()))

    def __len__(self) -> int:
        return len(self._routers)

    @property
    def routers(self) -> Dict[str, Router]:
        """Live router mapping keyed by router name."""

        return self._routers

    @property
    def policy(self) -> TreePolicy:
        return self._policy

    @property
    def registry(self) -> CounterRegistry | None:
        return self._engine.registry

    def router(self, name: str) -> Router | None:
        return self._routers.get(name)

    # ------------------------------------------------------------------
    # Updates and notifications
    # ------------------------------------------------------------------
    def update(self, snapshot: Snapshot) -> UpdateResult:
        """Discover new destinations, notify listeners, then refresh metrics."""

        return self._engine.update(self._routers, snapshot, self._dispatch)

    def on_added_destinations(self, callback: DiscoveryCallback) -> DiscoveryCallback:
        """Register *callback* for newly discovered destinations.

        Callbacks run synchronously inside :meth:`update`, in registration order,
        once per update that discovers at least one destination. They run before
        the update attributes metrics, so new destinations still have empty
        metric tables. Returns *callback* so the method works as a decorator.
        """

        self._listeners.append(callback)
        return callback

    def remove_listener(self, callback: DiscoveryCallback) -> bool:
        try:
            self._listeners.remove(callback)
        except ValueError:
            return False
        return True

    def _dispatch(self, added: List[Destination]) -> None:
        for listener in list(self._listeners):
            if self._policy.propagate_listener_errors:
                listener(list(added))
                continue
            try:
                listener(list(added))
            except Exception:
                _LOGGER.exception("Destination listener failed", listener=repr(listener))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def find_by_metric_key(self, key: str) -> AnyScope | None:
        """Find the router, server or destination owning *key*."""

        return find_by_metric_key(self._routers, key)

    def find_matching_router(self, key: str) -> Router | None:
        return find_matching_router(self._routers, key)

    def servers(self, router_name: str | None = None) -> List[Server]:
        """Servers of one router, or of every router when *router_name* is omitted."""

        if router_name is not None:
            router = self._routers.get(router_name)
            return list(router.servers) if router is not None else []
        return [server for router in self._routers.values() for server in router.servers]

    def destinations(self, router_name: str | None = None) -> List[Destination]:
        """Destinations of one router, or of every router when *router_name* is omitted."""

        if router_name is not None:
            router = self._routers.get(router_name)
            return list(router.destinations.values()) if router is not None else []
        return [
            destination
            for router in self._routers.values()
            for destination in router.destinations.values()
        ]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation of the hierarchy keyed by router name."""

        return {name: router.model_dump(mode="json") for name, router in self._routers.items()}


__all__ = ["RouterTree"]
