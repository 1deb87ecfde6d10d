"""Policy models controlling aggregation behaviour."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml
from pydantic import BaseModel, Field, model_validator

from .overrides import decode_value, env_overrides, set_path


class TreePolicy(BaseModel):
    """Behavioural switches for the aggregation engine and tree handle.

    Listener errors propagate to the caller of ``update`` unless
    ``propagate_listener_errors`` is disabled, in which case they are logged and
    the remaining listeners and the attribution pass still run.
    """

    counters_enabled: bool = Field(default=True)
    propagate_listener_errors: bool = Field(default=True)
    log_dropped_keys: bool = Field(
        default=False,
        description="Emit a debug log line for every key that matched no scope.",
    )
    max_logged_keys: int = Field(
        default=20,
        ge=1,
        description="Upper bound on keys listed in a single log record.",
    )


class Policies(BaseModel):
    """Root policy container."""

    policy_version: str = Field(default="2026-10-01")
    tree: TreePolicy = Field(default_factory=TreePolicy)

    @model_validator(mode="after")
    def _validate_policy_version(self) -> "Policies":
        if not self.policy_version:
            raise ValueError("policy_version must be provided")
        return self


def _copy_mapping(source: Mapping[str, Any]) -> MutableMapping[str, Any]:
    copied: MutableMapping[str, Any] = {}
    for key, value in source.items():
        copied[key] = _copy_mapping(value) if isinstance(value, Mapping) else value
    return copied


def load_policies(source: os.PathLike[str] | str | Mapping[str, Any]) -> Policies:
    """Load policies from a mapping or YAML file.

    ``ROUTERTREE_POLICY__TREE__COUNTERS_ENABLED=false`` style variables are
    applied on top; their values are JSON-decoded when possible.
    """

    if isinstance(source, Mapping):
        raw = _copy_mapping(source)
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Policy file not found: {path}")
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, MutableMapping):
            raise ValueError(f"Policy file '{path}' must contain a mapping at the top level")
        raw = _copy_mapping(loaded)
    for override_path, value in env_overrides("ROUTERTREE_POLICY__"):
        set_path(raw, override_path, decode_value(value))
    return Policies.model_validate(raw)


__all__ = ["TreePolicy", "Policies", "load_policies"]
