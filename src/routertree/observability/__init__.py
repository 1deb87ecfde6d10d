"""Observability infrastructure for routertree."""
from __future__ import annotations

from .registry import PHASE_COUNTERS, CounterRegistry, CounterSnapshot

__all__ = ["CounterRegistry", "CounterSnapshot", "PHASE_COUNTERS"]
