"""End-to-end smoke tests for the Typer-based routertree CLI."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
import typer
from loguru import logger
from typer.testing import CliRunner

from routertree.cli.common import collect_overrides
from routertree.cli.main import app


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_env(tmp_path: Path) -> dict[str, str]:
    return {"ROUTERTREE_SETTINGS__PATHS__LOGS_DIR": str(tmp_path / "logs")}


@pytest.fixture(autouse=True)
def _restore_loguru():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture()
def snapshot_file(tmp_path: Path) -> Path:
    path = tmp_path / "initial.json"
    path.write_text(
        json.dumps(
            {
                "rt/foo/srv/1.1.1.1/8080/requests": 10,
                "rt/foo/dst/id/bar/requests": 3,
                "rt/foo/dst/id/bar/success": 2,
                "rt/foo/bindcache/size": 1,
                "jvm/uptime": 99,
            }
        ),
        encoding="utf-8",
    )
    return path


def test_collect_overrides_builds_nested_mapping() -> None:
    assert collect_overrides(["policies.tree.max_logged_keys=3", "log_level=debug"]) == {
        "policies": {"tree": {"max_logged_keys": 3}},
        "log_level": "debug",
    }


def test_collect_overrides_merges_repeated_paths() -> None:
    merged = collect_overrides(
        ["policies.tree.counters_enabled=false", "policies.tree.max_logged_keys=2"]
    )
    assert merged == {"policies": {"tree": {"counters_enabled": False, "max_logged_keys": 2}}}


@pytest.mark.parametrize(
    "arguments",
    [
        ["missing-separator"],
        ["=1"],
        ["policies..tree=1"],
        ["log_level=debug", "log_level.nested=1"],
    ],
)
def test_collect_overrides_rejects_malformed_arguments(arguments: list[str]) -> None:
    with pytest.raises(typer.BadParameter):
        collect_overrides(arguments)


def test_show_renders_hierarchy(runner: CliRunner, cli_env: dict[str, str], snapshot_file: Path) -> None:
    result = runner.invoke(app, ["show", str(snapshot_file)], env=cli_env)
    assert result.exit_code == 0, result.output
    assert "1.1.1.1/8080" in result.stdout
    assert "bar" in result.stdout
    assert "server" in result.stdout
    assert "destination" in result.stdout


def test_show_json_output(runner: CliRunner, cli_env: dict[str, str], snapshot_file: Path) -> None:
    result = runner.invoke(app, ["show", str(snapshot_file), "--json"], env=cli_env)
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    router = payload["foo"]
    assert router["metrics"] == {"bindcache/size": 1}
    assert router["servers"][0]["metrics"] == {"requests": 10}
    assert router["destinations"]["bar"]["metrics"] == {"requests": 3, "success": 2}


def test_show_unknown_router(runner: CliRunner, cli_env: dict[str, str], snapshot_file: Path) -> None:
    result = runner.invoke(app, ["show", str(snapshot_file), "--router", "nope"], env=cli_env)
    assert result.exit_code == 0, result.output
    assert "No routers found" in result.stdout


def test_resolve_reports_owning_scope(runner: CliRunner, cli_env: dict[str, str], snapshot_file: Path) -> None:
    result = runner.invoke(
        app,
        [
            "resolve",
            str(snapshot_file),
            "rt/foo/dst/id/bar/requests",
            "rt/foo/srv/1.1.1.1/8080/latency_ms",
            "jvm/uptime",
        ],
        env=cli_env,
    )
    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert "destination bar (router=foo, metric=requests)" in lines[0]
    assert "server 1.1.1.1/8080 (router=foo, metric=latency_ms)" in lines[1]
    assert lines[2].endswith("unattributed")


def test_servers_and_destinations_commands(
    runner: CliRunner, cli_env: dict[str, str], snapshot_file: Path
) -> None:
    servers = runner.invoke(app, ["servers", str(snapshot_file), "--router", "foo"], env=cli_env)
    destinations = runner.invoke(app, ["destinations", str(snapshot_file)], env=cli_env)
    missing = runner.invoke(app, ["destinations", str(snapshot_file), "-r", "nope"], env=cli_env)

    assert servers.exit_code == 0, servers.output
    assert "1.1.1.1/8080" in servers.stdout
    assert destinations.exit_code == 0, destinations.output
    assert "bar" in destinations.stdout
    assert "No destinations found" in missing.stdout


def test_replay_reports_discoveries(
    runner: CliRunner, cli_env: dict[str, str], snapshot_file: Path, tmp_path: Path
) -> None:
    followup = tmp_path / "next.json"
    followup.write_text(json.dumps({"rt/foo/dst/id/baz/requests": 1, "rt/foo/dst/id/bar/requests": 4}))
    repeat = tmp_path / "again.json"
    repeat.write_text(json.dumps({"rt/foo/dst/id/baz/requests": 2}))

    result = runner.invoke(app, ["replay", str(snapshot_file), str(followup), str(repeat)], env=cli_env)

    assert result.exit_code == 0, result.output
    assert "step 1 (next.json): attributed=2 dropped=0 new_destinations=1" in result.stdout
    assert "+ foo/baz" in result.stdout
    assert "step 2 (again.json): attributed=1 dropped=0 new_destinations=0" in result.stdout
    assert "Counters" in result.stdout


def test_missing_snapshot_is_a_cli_error(runner: CliRunner, cli_env: dict[str, str], tmp_path: Path) -> None:
    result = runner.invoke(app, ["show", str(tmp_path / "missing.json")], env=cli_env)
    assert result.exit_code == 2
    assert "Error:" in result.stdout
    assert "Snapshot file not found" in result.stdout


def test_cli_error_maps_to_exit_code_two(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ROUTERTREE_SETTINGS__PATHS__LOGS_DIR", str(tmp_path / "logs"))
    exit_code = app(prog_name="routertree", args=["show", str(tmp_path / "missing.json")], standalone_mode=False)
    assert exit_code == 2


def test_verbose_prints_context(runner: CliRunner, cli_env: dict[str, str], snapshot_file: Path) -> None:
    result = runner.invoke(
        app,
        ["--verbose", "-o", "policies.tree.counters_enabled=false", "servers", str(snapshot_file)],
        env=cli_env,
    )
    assert result.exit_code == 0, result.output
    assert "CLI Context" in result.stdout
    assert "disabled" in result.stdout
