"""Core domain entities describing a router hierarchy."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Union

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

# RGB triplets shared with the admin dashboard colour ramp.
PALETTE: tuple[str, ...] = (
    "224,243,219",
    "204,235,197",
    "168,221,181",
    "123,204,196",
    "78,179,211",
    "43,140,190",
    "8,104,172",
    "8,64,129",
)

ROUTER_KEY_PREFIX = "rt/"


def color_for(label: str) -> str:
    """Return the palette entry selected by the summed UTF-16 code units of *label*.

    Characters outside the BMP count as their surrogate pair, matching the
    dashboard colour ramp.
    """

    encoded = label.encode("utf-16-le", "surrogatepass")
    total = sum(encoded[0::2]) + 256 * sum(encoded[1::2])
    return PALETTE[total % len(PALETTE)]


class Scope(BaseModel):
    """Any entity owning a key prefix and a table of locally named metrics.

    ``metrics`` maps the remainder of a key (after :attr:`prefix`) to the last
    value observed for it. A missing entry means the value is unknown.
    """

    router: str = Field(..., description="Name of the router owning this scope")
    label: str = Field(..., description="Display name of the scope")
    prefix: str = Field(..., min_length=1, description="Exact key prefix owned by the scope")
    metrics: Dict[str, Any] = Field(
        default_factory=dict,
        description="Last-seen sample per local metric name; values are passed through untouched.",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def color(self) -> str:
        return color_for(self.label)

    @field_validator("prefix")
    @classmethod
    def _require_separator(cls, value: str) -> str:
        if not value.endswith("/"):
            raise ValueError("prefix must end with '/'")
        return value

    @model_validator(mode="after")
    def _validate_ownership(self) -> "Scope":
        owner = f"{ROUTER_KEY_PREFIX}{self.router}/"
        if not self.prefix.startswith(owner):
            raise ValueError(f"prefix {self.prefix!r} is not owned by router {self.router!r}")
        return self

    def local_name(self, key: str) -> str:
        """Strip this scope's prefix from *key*."""

        return key[len(self.prefix) :]


class Server(Scope):
    """A listening socket of a router."""

    kind: Literal["server"] = "server"
    ip: str = Field(..., min_length=1)
    port: int = Field(..., ge=0)


class Destination(Scope):
    """A downstream endpoint selected by a router."""

    kind: Literal["destination"] = "destination"

    @property
    def id(self) -> str:
        return self.label


class Router(Scope):
    """Root scope owning servers (append order) and destinations (discovery order)."""

    kind: Literal["router"] = "router"
    servers: List[Server] = Field(default_factory=list)
    destinations: Dict[str, Destination] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.label

    @model_validator(mode="after")
    def _validate_children(self) -> "Router":
        for child in [*self.servers, *self.destinations.values()]:
            if child.router != self.name or not child.prefix.startswith(self.prefix):
                raise ValueError(
                    f"{child.kind} {child.label!r} does not belong to router {self.name!r}"
                )
        return self


AnyScope = Union[Router, Server, Destination]


__all__ = [
    "PALETTE",
    "ROUTER_KEY_PREFIX",
    "color_for",
    "Scope",
    "Server",
    "Destination",
    "Router",
    "AnyScope",
]
