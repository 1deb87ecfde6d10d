"""Commands inspecting router hierarchies built from snapshot files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from routertree.entities.core import Scope

from .common import build_tree, console, get_state, read_snapshot, render_panel

SNAPSHOT_ARGUMENT_HELP = "JSON or YAML file holding a flat metric-key to value mapping."


def _scope_table(title: str, scopes: Iterable[Scope]) -> Table:
    table = Table(title=title, box=None)
    table.add_column("Kind")
    table.add_column("Router")
    table.add_column("Label")
    table.add_column("Color")
    table.add_column("Metrics", justify="right")
    for scope in scopes:
        table.add_row(
            scope.kind,
            escape(scope.router),
            escape(scope.label),
            f"[rgb({scope.color})]{scope.color}[/]",
            str(len(scope.metrics)),
        )
    return table


def _show_command(
    ctx: typer.Context,
    snapshot: Path = typer.Argument(..., help=SNAPSHOT_ARGUMENT_HELP),
    router: Optional[str] = typer.Option(None, "--router", "-r", help="Restrict output to one router."),
    as_json: bool = typer.Option(False, "--json", help="Emit the hierarchy as JSON."),
) -> None:
    state = get_state(ctx)
    tree = build_tree(state, snapshot)
    payload = tree.to_dict()
    if router is not None:
        payload = {name: data for name, data in payload.items() if name == router}
    if as_json:
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return
    if not payload:
        console.print("[yellow]No routers found.[/yellow]")
        return

    scopes: List[Scope] = []
    for candidate in tree:
        if router is not None and candidate.name != router:
            continue
        scopes.append(candidate)
        scopes.extend(candidate.servers)
        scopes.extend(candidate.destinations.values())
    console.print(_scope_table(f"Routers in {snapshot.name}", scopes))


def _resolve_command(
    ctx: typer.Context,
    snapshot: Path = typer.Argument(..., help=SNAPSHOT_ARGUMENT_HELP),
    keys: List[str] = typer.Argument(..., help="Metric keys to attribute."),
) -> None:
    state = get_state(ctx)
    tree = build_tree(state, snapshot)
    for key in keys:
        scope = tree.find_by_metric_key(key)
        if scope is None:
            console.print(f"{escape(key)} -> [yellow]unattributed[/yellow]", soft_wrap=True)
            continue
        console.print(
            f"{escape(key)} -> {scope.kind} {escape(scope.label)} "
            f"(router={escape(scope.router)}, metric={escape(scope.local_name(key))})",
            soft_wrap=True,
        )


def _servers_command(
    ctx: typer.Context,
    snapshot: Path = typer.Argument(..., help=SNAPSHOT_ARGUMENT_HELP),
    router: Optional[str] = typer.Option(None, "--router", "-r", help="Restrict output to one router."),
) -> None:
    state = get_state(ctx)
    tree = build_tree(state, snapshot)
    servers = tree.servers(router)
    if not servers:
        console.print("[yellow]No servers found.[/yellow]")
        return
    console.print(_scope_table("Servers", servers))


def _destinations_command(
    ctx: typer.Context,
    snapshot: Path = typer.Argument(..., help=SNAPSHOT_ARGUMENT_HELP),
    router: Optional[str] = typer.Option(None, "--router", "-r", help="Restrict output to one router."),
) -> None:
    state = get_state(ctx)
    tree = build_tree(state, snapshot)
    destinations = tree.destinations(router)
    if not destinations:
        console.print("[yellow]No destinations found.[/yellow]")
        return
    console.print(_scope_table("Destinations", destinations))


def _replay_command(
    ctx: typer.Context,
    snapshot: Path = typer.Argument(..., help="Initial snapshot used to seed servers."),
    followups: List[Path] = typer.Argument(..., help="Snapshots applied in order as updates."),
) -> None:
    state = get_state(ctx)
    tree = build_tree(state, snapshot)
    discovered: List[str] = []

    @tree.on_added_destinations
    def _record(added) -> None:
        discovered.extend(f"{destination.router}/{destination.label}" for destination in added)

    for step, path in enumerate(followups, start=1):
        discovered.clear()
        result = tree.update(read_snapshot(path))
        console.print(
            f"step {step} ({escape(path.name)}): attributed={result.attributed} "
            f"dropped={result.dropped} new_destinations={len(result.added)}",
            soft_wrap=True,
        )
        for name in discovered:
            console.print(f"  + {escape(name)}", soft_wrap=True)

    if tree.registry is not None:
        render_panel("Counters", tree.registry.as_dict())
