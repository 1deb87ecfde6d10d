"""Tests for the counter registry."""

from __future__ import annotations

import pytest

from routertree.observability import PHASE_COUNTERS, CounterRegistry


def test_counter_registry_tracks_increments() -> None:
    registry = CounterRegistry()
    registry.increment("keys_matched", 3, phase="Discovery")
    registry.increment("destinations_added", phase="Discovery")
    registry.bulk_update({"attributed": 4, "dropped": 1}, phase="Attribution")
    registry.increment("by_kind", phase="Attribution", label="server")
    registry.increment("by_kind", 2, phase="Attribution", label="destination")

    snapshot = registry.snapshot()
    assert snapshot.counters["Discovery"]["keys_matched"] == 3
    assert snapshot.counters["Discovery"]["destinations_added"] == 1
    assert snapshot.counters["Attribution"]["attributed"] == 4
    assert snapshot.counters["Attribution"]["by_kind"] == {"destination": 2, "server": 1}


def test_snapshot_covers_every_phase_in_sorted_order() -> None:
    snapshot = CounterRegistry().snapshot()
    assert list(snapshot.counters) == sorted(PHASE_COUNTERS)
    assert snapshot.counters["Servers"] == {"keys_in": 0, "routers_added": 0, "servers_added": 0}


def test_unknown_phase_or_counter_is_rejected() -> None:
    registry = CounterRegistry()
    with pytest.raises(KeyError):
        registry.increment("keys_in", phase="Nope")
    with pytest.raises(KeyError):
        registry.increment("nope", phase="Servers")
    with pytest.raises(KeyError):
        registry.bulk_update({"nope": 1}, phase="Servers")


def test_label_rules_are_enforced() -> None:
    registry = CounterRegistry()
    with pytest.raises(ValueError):
        registry.increment("by_kind", phase="Attribution")
    with pytest.raises(ValueError):
        registry.increment("attributed", phase="Attribution", label="server")
    with pytest.raises(ValueError):
        registry.set("by_kind", 1, phase="Attribution")
    with pytest.raises(ValueError):
        registry.bulk_update({"attributed": 1, "by_kind": 1}, phase="Attribution")
    assert registry.snapshot().counters["Attribution"]["attributed"] == 0


def test_set_and_reset() -> None:
    registry = CounterRegistry()
    registry.set("servers_added", 9, phase="Servers")
    registry.increment("by_kind", phase="Attribution", label="router")
    assert registry.as_dict()["Servers"]["servers_added"] == 9

    registry.reset()

    counters = registry.as_dict()
    assert counters["Servers"]["servers_added"] == 0
    assert counters["Attribution"]["by_kind"] == {}
