"""Most-specific scope lookup for raw metric keys."""

from __future__ import annotations

from typing import Iterable, Mapping, TypeVar

from routertree.entities.core import AnyScope, Destination, Router, Server

_S = TypeVar("_S", Router, Server, Destination)


def _first_owner(scopes: Iterable[_S], key: str) -> _S | None:
    for scope in scopes:
        if key.startswith(scope.prefix):
            return scope
    return None


def find_matching_router(routers: Mapping[str, Router], key: str) -> Router | None:
    """Return the first router, in mapping order, whose prefix starts *key*."""

    if not isinstance(key, str):
        return None
    return _first_owner(routers.values(), key)


def find_matching_server(servers: Iterable[Server], key: str) -> Server | None:
    return _first_owner(servers, key)


def find_matching_destination(destinations: Mapping[str, Destination], key: str) -> Destination | None:
    return _first_owner(destinations.values(), key)


def find_by_metric_key(routers: Mapping[str, Router], key: str) -> AnyScope | None:
    """Resolve the scope owning *key*.

    Servers are checked before destinations; when neither matches, the key
    belongs to the router itself. ``None`` means no router owns the key, which
    is an ordinary outcome for feeds carrying unrelated subsystems.
    """

    router = find_matching_router(routers, key)
    if router is None:
        return None
    server = find_matching_server(router.servers, key)
    if server is not None:
        return server
    destination = find_matching_destination(router.destinations, key)
    if destination is not None:
        return destination
    return router


__all__ = [
    "find_matching_router",
    "find_matching_server",
    "find_matching_destination",
    "find_by_metric_key",
]
