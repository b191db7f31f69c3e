"""Tests for workspace_release.cli."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from workspace_release.cli import cli
from workspace_release.shell import CommandResult


def read_version(root: Path, name: str) -> str:
    return json.loads((root / "packages" / name / "package.json").read_text())["version"]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestBump:
    def test_writes_manifests(self, runner: CliRunner, workspace_repo: Path) -> None:
        result = runner.invoke(cli, ["bump", "2.0.0-beta.1"])

        assert result.exit_code == 0, result.output
        assert "a, b → 2.0.0-beta.1 (beta)" in result.output
        assert read_version(workspace_repo, "a") == "2.0.0-beta.1"
        assert read_version(workspace_repo, "b") == "2.0.0-beta.1"

    def test_dry_run(self, runner: CliRunner, workspace_repo: Path) -> None:
        result = runner.invoke(cli, ["bump", "2.0.0", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Bumping versions in a, b" in result.output
        assert read_version(workspace_repo, "a") == "1.0.0"

    def test_invalid_version(self, runner: CliRunner, workspace_repo: Path) -> None:
        result = runner.invoke(cli, ["bump", "banana"])

        assert result.exit_code == 1
        assert "Invalid version" in result.output

    def test_no_manifest(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(cli, ["bump", "2.0.0"])

        assert result.exit_code == 1
        assert "Nothing to do" in result.output

    def test_disabled_in_config(self, runner: CliRunner, workspace_repo: Path) -> None:
        (workspace_repo / ".release-it.json").write_text(
            json.dumps({"plugins": {"release-it-yarn-workspaces": False}})
        )

        result = runner.invoke(cli, ["bump", "2.0.0"])

        assert result.exit_code == 1
        assert read_version(workspace_repo, "a") == "1.0.0"


class TestRelease:
    @patch("workspace_release.host.run_command")
    def test_bumps_and_publishes(
        self, mock_run: MagicMock, runner: CliRunner, workspace_repo: Path
    ) -> None:
        mock_run.side_effect = lambda args, **kwargs: CommandResult(command=list(args))

        result = runner.invoke(cli, ["release", "2.0.0", "--skip-checks", "--ci"])

        assert result.exit_code == 0, result.output
        assert read_version(workspace_repo, "b") == "2.0.0"
        publishes = [c.args[0] for c in mock_run.call_args_list]
        assert publishes == [["npm", "publish", ".", "--tag", "latest"]] * 2
        assert "https://www.npmjs.com/package/a" in result.output
        assert "https://www.npmjs.com/package/b" in result.output

    @patch("workspace_release.host.run_command")
    def test_no_publish(
        self, mock_run: MagicMock, runner: CliRunner, workspace_repo: Path
    ) -> None:
        result = runner.invoke(
            cli, ["release", "2.0.0", "--skip-checks", "--ci", "--no-publish"]
        )

        assert result.exit_code == 0, result.output
        mock_run.assert_not_called()
        assert read_version(workspace_repo, "a") == "2.0.0"

    @patch("workspace_release.host.run_command")
    def test_dist_tag_and_otp(
        self, mock_run: MagicMock, runner: CliRunner, workspace_repo: Path
    ) -> None:
        mock_run.side_effect = lambda args, **kwargs: CommandResult(command=list(args))

        result = runner.invoke(
            cli,
            ["release", "2.0.0", "--skip-checks", "--ci", "--dist-tag", "next", "--otp", "123456"],
        )

        assert result.exit_code == 0, result.output
        assert mock_run.call_args_list[0].args[0] == [
            "npm", "publish", ".", "--tag", "next", "--otp", "123456",
        ]


class TestPublish:
    @patch("workspace_release.host.run_command")
    def test_publishes_current_version(
        self, mock_run: MagicMock, runner: CliRunner, workspace_repo: Path
    ) -> None:
        mock_run.side_effect = lambda args, **kwargs: CommandResult(command=list(args))

        result = runner.invoke(cli, ["publish", "--skip-checks", "--ci", "-w", "packages/a"])

        assert result.exit_code == 0, result.output
        assert [c.args[0] for c in mock_run.call_args_list] == [
            ["npm", "publish", ".", "--tag", "latest"],
        ]
        assert read_version(workspace_repo, "a") == "1.0.0"
