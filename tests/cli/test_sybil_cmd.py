"""Tests for ``skilltrust sybil`` command and the top-level group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from skilltrust import __version__
from skilltrust.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


class TestSybilCommand:

    def test_cluster_and_membership(self, runner: CliRunner, snapshot_file: Path) -> None:
        result = runner.invoke(cli, ["sybil", str(snapshot_file), "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["clusters"] == [["alice", "bob"]]
        assert data["membership"]["alice"] is True
        assert data["membership"]["user-0"] is False
        assert data["membership"]["skill-search"] is False

    def test_text_output(self, runner: CliRunner, snapshot_file: Path) -> None:
        result = runner.invoke(cli, ["sybil", str(snapshot_file)])
        assert result.exit_code == 0
        assert "1 cluster(s)" in result.output
        assert "alice, bob" in result.output

    def test_no_clusters(self, runner: CliRunner, yaml_snapshot_file: Path) -> None:
        result = runner.invoke(cli, ["sybil", str(yaml_snapshot_file)])
        assert result.exit_code == 0
        assert "No sybil clusters detected" in result.output

    def test_missing_snapshot_exits_2(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["sybil", str(tmp_path / "absent.yaml"), "--format", "json"]
        )
        assert result.exit_code == 2
        assert "error" in json.loads(result.output)


class TestCliGroup:

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("score", "leaderboard", "sybil"):
            assert name in result.output

    def test_verbose_flag_accepted(self, runner: CliRunner, snapshot_file: Path) -> None:
        result = runner.invoke(cli, ["-v", "sybil", str(snapshot_file)])
        assert result.exit_code == 0
