"""Tests for the sitekit CLI application."""

from __future__ import annotations

import runpy
import sys

import pytest
from typer.testing import CliRunner

from sitekit import meta
from sitekit.cli.app import app

# Mark all tests in this module as CLI tests
pytestmark = pytest.mark.cli

runner = CliRunner()


def test_app_help() -> None:
    """--help lists the commands."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("conf", "sync", "check-url", "version"):
        assert command in result.stdout


def test_app_version_option() -> None:
    """--version prints the version and exits."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert meta.__version__ in result.stdout


def test_version_command() -> None:
    """The version command prints name and version."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"{meta.__app_name__} {meta.__version__}" in result.stdout


def test_no_args_shows_help() -> None:
    """Running without a command shows usage."""
    result = runner.invoke(app, [])
    assert "Usage" in result.output


def test_invalid_command() -> None:
    """An unknown command is an error."""
    result = runner.invoke(app, ["deploy"])
    assert result.exit_code != 0


def test_cli_module_guard_executes(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the CLI module guard invokes the Typer app when executed directly."""

    calls: list[tuple[tuple[object, ...], dict[str, object]]] = []

    def fake_call(_self: object, *args: object, **kwargs: object) -> None:
        calls.append((args, kwargs))

    monkeypatch.setattr("typer.main.Typer.__call__", fake_call)

    sys.modules.pop("sitekit.cli.app", None)
    runpy.run_module("sitekit.cli.app", run_name="__main__")

    assert calls == [((), {})]
