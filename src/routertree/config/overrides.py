"""Nested mapping helpers for layering configuration overrides."""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Iterator, List, Mapping, MutableMapping, Sequence, Tuple


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Return *base* updated with *override*, merging nested mappings key by key."""

    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def set_path(target: MutableMapping[str, Any], path: Sequence[str], value: Any) -> None:
    """Assign *value* at *path*, creating intermediate mappings on demand.

    Raises ``ValueError`` when an intermediate segment already holds a scalar.
    """

    if not path:
        raise ValueError("Override path must not be empty")
    cursor = target
    for depth, segment in enumerate(path[:-1], start=1):
        nested = cursor.setdefault(segment, {})
        if not isinstance(nested, MutableMapping):
            raise ValueError(
                f"Cannot override '{'.'.join(path)}': '{'.'.join(path[:depth])}' is not a mapping"
            )
        cursor = nested
    cursor[path[-1]] = value


def decode_value(text: str) -> Any:
    """JSON-decode *text* when possible, otherwise return it unchanged."""

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def env_overrides(prefix: str) -> Iterator[Tuple[List[str], str]]:
    """Yield ``(path, raw value)`` pairs for variables named ``<prefix>A__B``."""

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        path = [segment.lower() for segment in key[len(prefix) :].split("__") if segment]
        if path:
            yield path, value


__all__ = ["deep_merge", "set_path", "decode_value", "env_overrides"]
