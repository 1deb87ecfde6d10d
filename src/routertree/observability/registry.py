"""Counter registry tracking seeding, discovery and attribution activity."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Mapping

PHASE_COUNTERS: Mapping[str, tuple[str, ...]] = {
    "Servers": ("keys_in", "routers_added", "servers_added"),
    "Discovery": ("keys_matched", "destinations_added", "unknown_router", "notifications"),
    "Attribution": ("keys_in", "attributed", "dropped", "by_kind"),
}

# Counters that accept labelled increments (scope kind breakdowns).
_LABELLED_COUNTERS: Mapping[str, frozenset[str]] = {
    "Attribution": frozenset({"by_kind"}),
}


@dataclass(frozen=True)
class CounterSnapshot:
    """Immutable snapshot of the registry state."""

    counters: Mapping[str, Mapping[str, Any]]


class CounterRegistry:
    """Registry of canonical counters, keyed by phase.

    The registry follows the tree's single-writer model and performs no locking.
    """

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {
            phase: {counter: 0 for counter in counters}
            for phase, counters in PHASE_COUNTERS.items()
        }
        for phase, labelled in _LABELLED_COUNTERS.items():
            for counter in labelled:
                self._data[phase][counter] = Counter()

    def _check(self, phase: str, counter: str) -> None:
        if phase not in PHASE_COUNTERS:
            raise KeyError(f"Unknown observability phase '{phase}'")
        if counter not in PHASE_COUNTERS[phase]:
            raise KeyError(f"Unknown counter '{counter}' for phase '{phase}'")

    def increment(
        self,
        counter: str,
        value: int = 1,
        *,
        phase: str,
        label: str | None = None,
    ) -> None:
        """Increment *counter* within *phase* by *value*.

        Labelled counters (``by_kind``) require *label*; plain counters reject it.
        """

        self._check(phase, counter)
        slot = self._data[phase][counter]
        if isinstance(slot, Counter):
            if label is None:
                raise ValueError(f"Counter '{counter}' requires a label but none was provided")
            slot[label] += value
            return
        if label is not None:
            raise ValueError(f"Counter '{counter}' does not support labelled increments")
        self._data[phase][counter] = int(slot) + int(value)

    def set(self, counter: str, value: int, *, phase: str) -> None:
        """Set *counter* in *phase* to *value* (integer counters only)."""

        self._check(phase, counter)
        if isinstance(self._data[phase][counter], Counter):
            raise ValueError(f"Counter '{counter}' in phase '{phase}' is label-based")
        self._data[phase][counter] = int(value)

    def bulk_update(self, values: Mapping[str, int], *, phase: str) -> None:
        """Increment multiple integer counters of *phase* at once."""

        if phase not in PHASE_COUNTERS:
            raise KeyError(f"Unknown observability phase '{phase}'")
        invalid = set(values) - set(PHASE_COUNTERS[phase])
        if invalid:
            raise KeyError(f"Unknown counters for phase '{phase}': {sorted(invalid)}")
        for name in values:
            if isinstance(self._data[phase][name], Counter):
                raise ValueError(f"Counter '{name}' is label-based; use `increment` with a label")
        for name, delta in values.items():
            self._data[phase][name] = int(self._data[phase][name]) + int(delta)

    def snapshot(self) -> CounterSnapshot:
        """Return an immutable snapshot with stable key ordering."""

        frozen: Dict[str, Dict[str, Any]] = {}
        for phase in sorted(self._data):
            counters: Dict[str, Any] = {}
            for name in PHASE_COUNTERS[phase]:
                value = self._data[phase][name]
                if isinstance(value, Counter):
                    counters[name] = {label: value[label] for label in sorted(value)}
                else:
                    counters[name] = int(value)
            frozen[phase] = counters
        return CounterSnapshot(counters=frozen)

    def as_dict(self) -> Dict[str, Any]:
        return {phase: dict(counters) for phase, counters in self.snapshot().counters.items()}

    def reset(self) -> None:
        """Clear all counters back to their initial state."""

        for phase, counters in PHASE_COUNTERS.items():
            for counter in counters:
                if isinstance(self._data[phase][counter], Counter):
                    self._data[phase][counter].clear()
                else:
                    self._data[phase][counter] = 0

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"CounterRegistry(counters={self._data!r})"


__all__ = ["CounterRegistry", "CounterSnapshot", "PHASE_COUNTERS"]
