"""Primary Typer application wiring the routertree CLI."""

from __future__ import annotations

from typing import Any, Callable, List, Optional

import typer
from rich.table import Table

from . import commands
from .common import collect_overrides, configure_state, console, reports_cli_errors

app = typer.Typer(
    add_completion=False,
    help="Inspect router hierarchies reconstructed from flat metric snapshots.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    environment: Optional[str] = typer.Option(
        None,
        "--environment",
        "-e",
        help="Active configuration environment (development, testing, production).",
        show_default=False,
    ),
    override: List[str] = typer.Option(  # noqa: B008 - Typer callback signature
        [],
        "--override",
        "-o",
        metavar="KEY=VALUE",
        help="Configuration override in dotted.key=value notation (repeatable).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Emit debug logging and print the resolved CLI context.",
    ),
) -> None:
    """Configure shared CLI state prior to executing subcommands."""

    configure_state(
        ctx,
        environment=environment,
        overrides=collect_overrides(override),
        verbose=verbose,
    )

    if verbose:
        state = ctx.obj
        table = Table(title="CLI Context", show_header=False, box=None)
        table.add_row("Environment", state.environment)
        table.add_row("Policy version", state.settings.policy_version)
        table.add_row("Counters", "enabled" if state.settings.policies.tree.counters_enabled else "disabled")
        console.print(table)


def _register(name: str, help_text: str, command: Callable[..., Any]) -> None:
    app.command(name, help=help_text)(reports_cli_errors(command))


_register("show", "Render the router hierarchy of a snapshot.", commands._show_command)
_register("resolve", "Attribute metric keys to their owning scope.", commands._resolve_command)
_register("servers", "List servers, optionally for one router.", commands._servers_command)
_register("destinations", "List destinations, optionally for one router.", commands._destinations_command)
_register(
    "replay",
    "Seed from one snapshot and apply follow-up snapshots in order.",
    commands._replay_command,
)
