"""Factories producing freshly initialised hierarchy entities.

Builders never insert into parent collections; the aggregation engine owns
every mutation of the tree.
"""

from __future__ import annotations

from .core import ROUTER_KEY_PREFIX, Destination, Router, Server


def build_router(name: str) -> Router:
    return Router(router=name, label=name, prefix=f"{ROUTER_KEY_PREFIX}{name}/")


def build_server(router: str, ip: str, port: str | int) -> Server:
    """Build a server whose label and prefix reuse the port text verbatim."""

    label = f"{ip}/{port}"
    return Server(
        router=router,
        label=label,
        prefix=f"{ROUTER_KEY_PREFIX}{router}/srv/{label}/",
        ip=ip,
        port=port,
    )


def build_destination(router: str, id: str) -> Destination:  # noqa: A002 - key grammar name
    return Destination(
        router=router,
        label=id,
        prefix=f"{ROUTER_KEY_PREFIX}{router}/dst/id/{id}/",
    )


__all__ = ["build_router", "build_server", "build_destination"]
