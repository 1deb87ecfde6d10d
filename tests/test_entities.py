"""Unit tests for routertree.entities."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from routertree.entities import (
    PALETTE,
    Destination,
    Router,
    Server,
    build_destination,
    build_router,
    build_server,
    color_for,
)


def test_palette_has_eight_entries() -> None:
    assert len(PALETTE) == 8
    assert len(set(PALETTE)) == 8


def test_color_for_sums_character_codes() -> None:
    # ord("f") + 2 * ord("o") == 324, 324 % 8 == 4
    assert color_for("foo") == PALETTE[4] == "78,179,211"
    assert color_for("") == PALETTE[0]


def test_color_for_counts_astral_characters_as_surrogate_pairs() -> None:
    # 0xD83D + 0xDE00 == 112189, 112189 % 8 == 5
    assert color_for("\U0001F600") == PALETTE[5] == "43,140,190"
    assert color_for("a\U0001F600") == PALETTE[(ord("a") + 0xD83D + 0xDE00) % 8]


@pytest.mark.parametrize("label", ["foo", "1.1.1.1/8080", "#/io.l5d.fs/users", "ünïcode"])
def test_color_for_is_pure_and_in_palette(label: str) -> None:
    assert color_for(label) == color_for(label)
    assert color_for(label) in PALETTE


def test_build_router_shape() -> None:
    router = build_router("foo")
    assert isinstance(router, Router)
    assert router.kind == "router"
    assert router.name == router.label == "foo"
    assert router.prefix == "rt/foo/"
    assert router.servers == []
    assert router.destinations == {}
    assert router.metrics == {}
    assert router.color == color_for("foo")


def test_build_server_shape() -> None:
    server = build_server("foo", "1.2.3.4", "80")
    assert isinstance(server, Server)
    assert server.kind == "server"
    assert server.router == "foo"
    assert server.label == "1.2.3.4/80"
    assert server.prefix == "rt/foo/srv/1.2.3.4/80/"
    assert server.ip == "1.2.3.4"
    assert server.port == 80
    assert server.metrics == {}


def test_build_server_keeps_port_text_in_prefix() -> None:
    server = build_server("foo", "1.2.3.4", "0080")
    assert server.port == 80
    assert server.prefix == "rt/foo/srv/1.2.3.4/0080/"


def test_build_destination_shape() -> None:
    destination = build_destination("foo", "d1")
    assert isinstance(destination, Destination)
    assert destination.kind == "destination"
    assert destination.id == destination.label == "d1"
    assert destination.prefix == "rt/foo/dst/id/d1/"
    assert destination.color == color_for("d1")


def test_builders_return_fresh_metric_tables() -> None:
    first = build_destination("foo", "d1")
    second = build_destination("foo", "d1")
    first.metrics["requests"] = 1
    assert second.metrics == {}


def test_identical_labels_share_colors_across_kinds() -> None:
    assert build_router("a").color == build_destination("x", "a").color


def test_scope_rejects_foreign_prefix() -> None:
    with pytest.raises(ValidationError):
        Destination(router="foo", label="d1", prefix="rt/bar/dst/id/d1/")
    with pytest.raises(ValidationError):
        Destination(router="foo", label="d1", prefix="rt/foo/dst/id/d1")


def test_router_rejects_children_of_other_routers() -> None:
    with pytest.raises(ValidationError):
        Router(
            router="foo",
            label="foo",
            prefix="rt/foo/",
            servers=[build_server("bar", "1.1.1.1", "80")],
        )


def test_model_dump_includes_color_and_kind() -> None:
    dumped = build_server("foo", "1.2.3.4", "80").model_dump(mode="json")
    assert dumped["kind"] == "server"
    assert dumped["color"] == color_for("1.2.3.4/80")
    assert dumped["port"] == 80
