"""Loading of metric snapshots stored on disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from routertree.utils.logging import get_logger

_LOGGER = get_logger(module=__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


class SnapshotError(ValueError):
    """Raised when a snapshot file cannot be read as a flat key/value mapping."""


def load_snapshot(path: str | Path) -> Dict[str, Any]:
    """Read a flat ``metric key -> sample`` mapping from a JSON or YAML file.

    Keys are coerced to strings. Values are returned untouched.
    """

    target = Path(path)
    if not target.exists():
        raise SnapshotError(f"Snapshot file not found: {target}")
    try:
        text = target.read_text(encoding="utf-8")
        if target.suffix.lower() in _YAML_SUFFIXES:
            payload = yaml.safe_load(text)
        else:
            payload = json.loads(text)
    except (OSError, UnicodeDecodeError) as exc:
        raise SnapshotError(f"Snapshot file '{target}' cannot be read: {exc}") from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SnapshotError(f"Snapshot file '{target}' is not valid: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise SnapshotError(f"Snapshot file '{target}' must contain a mapping at the top level")
    _LOGGER.debug("Loaded snapshot", path=str(target), keys=len(payload))
    return {str(key): value for key, value in payload.items()}


__all__ = ["SnapshotError", "load_snapshot"]
