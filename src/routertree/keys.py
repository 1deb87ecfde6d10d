"""Classification of raw metric keys against the router key grammar.

Two patterns announce the existence of an entity:

* ``rt/<router>/srv/<ip>/<port>/requests`` for a listening server, and
* ``rt/<router>/dst/id/<id>/requests`` for a downstream destination.

Any other key is only eligible for attribution through prefix matching.
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple

# Any character except a line terminator (LF, CR, LS, PS); ports are ASCII digits.
_ANY = r"[^\n\r\u2028\u2029]"

SERVER_KEY_RE = re.compile(rf"rt/({_ANY}+)/srv/([^/]+)/([0-9]+)/requests")
DESTINATION_KEY_RE = re.compile(rf"rt/({_ANY}+)/dst/id/({_ANY}*)/requests")


class ServerKey(NamedTuple):
    """Identifiers embedded in a server discovery key."""

    router: str
    ip: str
    port: str


class DestinationKey(NamedTuple):
    """Identifiers embedded in a destination discovery key."""

    router: str
    id: str


def parse_server_key(key: Any) -> ServerKey | None:
    if not isinstance(key, str):
        return None
    match = SERVER_KEY_RE.fullmatch(key)
    if match is None:
        return None
    return ServerKey(*match.groups())


def parse_destination_key(key: Any) -> DestinationKey | None:
    if not isinstance(key, str):
        return None
    match = DESTINATION_KEY_RE.fullmatch(key)
    if match is None:
        return None
    return DestinationKey(*match.groups())


def classify_key(key: Any) -> ServerKey | DestinationKey | None:
    """Return the identifiers of a discovery key, or ``None`` for any other key.

    The server pattern takes precedence when a key happens to satisfy both.
    Seeding and discovery call the individual parsers, so they are unaffected.
    """

    return parse_server_key(key) or parse_destination_key(key)


__all__ = [
    "SERVER_KEY_RE",
    "DESTINATION_KEY_RE",
    "ServerKey",
    "DestinationKey",
    "parse_server_key",
    "parse_destination_key",
    "classify_key",
]
