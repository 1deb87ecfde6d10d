"""Shared helpers used across the routertree CLI modules."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from routertree.config.overrides import decode_value, set_path
from routertree.config.settings import Settings
from routertree.io import SnapshotError, load_snapshot
from routertree.tree import RouterTree
from routertree.utils.logging import configure_logging, get_logger, log_timing

console = Console()
_LOGGER = get_logger(module=__name__)


class CLIError(RuntimeError):
    """Exception raised for user-facing CLI errors."""


@dataclass(slots=True)
class CLIState:
    """State object attached to ``typer.Context`` for downstream commands."""

    settings: Settings
    overrides: Dict[str, Any]
    environment: str
    verbose: bool


def collect_overrides(arguments: Iterable[str]) -> Dict[str, Any]:
    """Fold repeated ``dotted.key=value`` arguments into one nested mapping.

    Values are JSON-decoded when possible, so ``policies.tree.counters_enabled=false``
    yields a boolean.
    """

    overrides: Dict[str, Any] = {}
    for argument in arguments:
        dotted, separator, raw = argument.partition("=")
        path = [segment.strip() for segment in dotted.split(".")]
        if not separator or not all(path):
            raise typer.BadParameter(f"Override '{argument}' must look like dotted.key=value")
        try:
            set_path(overrides, path, decode_value(raw))
        except ValueError as error:
            raise typer.BadParameter(str(error)) from error
    return overrides


def reports_cli_errors(command: Callable[..., Any]) -> Callable[..., Any]:
    """Render :class:`CLIError` raised by *command* as a message and exit code 2."""

    @functools.wraps(command)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return command(*args, **kwargs)
        except CLIError as error:
            console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
            raise typer.Exit(code=2) from error

    return wrapper


def resolve_settings(environment: str | None, overrides: Dict[str, Any]) -> Settings:
    """Construct :class:`Settings` with environment and overrides applied."""

    payload = dict(overrides)
    if environment:
        payload["environment"] = environment
    return Settings(**payload)


def configure_state(
    ctx: typer.Context,
    *,
    environment: str | None,
    overrides: Dict[str, Any],
    verbose: bool,
) -> None:
    """Populate ``ctx.obj`` with :class:`CLIState` and install log sinks."""

    settings = resolve_settings(environment, overrides)
    configure_logging(
        settings,
        level="DEBUG" if verbose else None,
        command=ctx.invoked_subcommand or "-",
    )
    ctx.obj = CLIState(
        settings=settings,
        overrides=overrides,
        environment=settings.environment,
        verbose=verbose,
    )


def get_state(ctx: typer.Context) -> CLIState:
    """Return the previously configured :class:`CLIState`."""

    if ctx.obj is None:
        raise CLIError("CLI context is not initialised")
    if not isinstance(ctx.obj, CLIState):  # pragma: no cover - defensive guard
        raise CLIError("Unexpected CLI context payload")
    return ctx.obj


def render_panel(title: str, content: Mapping[str, Any]) -> None:
    """Utility for rendering JSON-like mappings using Rich panels."""

    from rich.json import JSON as RichJSON

    console.print(Panel(RichJSON.from_data(content), title=title, border_style="cyan"))


def read_snapshot(path: Path) -> Dict[str, Any]:
    """Load a snapshot file, translating loader failures into :class:`CLIError`."""

    try:
        return load_snapshot(path)
    except SnapshotError as error:
        raise CLIError(str(error)) from error


def build_tree(state: CLIState, path: Path) -> RouterTree:
    snapshot = read_snapshot(path)
    with log_timing("build_tree", logger_=_LOGGER):
        tree = RouterTree(snapshot, policy=state.settings.policies.tree)
    _LOGGER.debug("Built router tree", path=str(path), routers=len(tree))
    return tree
