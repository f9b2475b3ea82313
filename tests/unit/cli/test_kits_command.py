"""Unit tests for the kits and inspect commands."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from stencil.main import cli


def test_kits_table(cli_runner: CliRunner, workdir: Path) -> None:
    """Test the kits table lists the built-in kit."""
    result = cli_runner.invoke(cli, ["kits"])

    assert result.exit_code == 0, result.output
    assert "uikit" in result.output


def test_kits_json(cli_runner: CliRunner, workdir: Path) -> None:
    """Test kits --format json."""
    result = cli_runner.invoke(cli, ["kits", "--format", "json"])

    assert result.exit_code == 0, result.output
    kits = {kit["name"]: kit for kit in json.loads(result.output)}
    assert kits["uikit"]["builtin"] is True
    assert kits["uikit"]["placeholders"] == ["DataType", "FEATURE", "TITLE"]


def test_inspect_json(cli_runner: CliRunner, workdir: Path) -> None:
    """Test inspect shows templates and output patterns."""
    result = cli_runner.invoke(cli, ["inspect", "uikit", "--format", "json"])

    assert result.exit_code == 0, result.output
    info = json.loads(result.output)
    assert info["syntax"] == "bare (DataType, FEATURE, TITLE)"
    assert info["templates"] == [
        {"source": "view-controller.swift", "output": "FEATUREViewController.swift"},
        {"source": "view-model.swift", "output": "FEATUREViewModel.swift"},
    ]


def test_inspect_table(cli_runner: CliRunner, workdir: Path) -> None:
    """Test inspect human-readable output."""
    result = cli_runner.invoke(cli, ["inspect", "uikit"])

    assert result.exit_code == 0, result.output
    assert "Syntax: bare" in result.output
    assert "view-model.swift" in result.output


def test_inspect_malformed_directory(cli_runner: CliRunner, workdir: Path) -> None:
    """Test inspect reports a malformed template."""
    templates = workdir / "templates"
    templates.mkdir()
    (templates / "a.txt").write_text("{{A")

    result = cli_runner.invoke(cli, ["inspect", str(templates)])

    assert result.exit_code == 1
    assert "Malformed template 'a.txt'" in result.output
