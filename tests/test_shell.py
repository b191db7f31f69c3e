"""Tests for workspace_release.shell."""

from __future__ import annotations

import sys
import time
from pathlib import Path

import pytest

from workspace_release.errors import CommandError
from workspace_release.shell import run_command, step


class TestRunCommand:
    """Tests for run_command()."""

    def test_captures_output(self) -> None:
        result = run_command([sys.executable, "-c", "print('hello')"])

        assert result.stdout.strip() == "hello"
        assert result.command[1:] == ["-c", "print('hello')"]

    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        result = run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )

        assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()

    def test_timeout_kills_command(self) -> None:
        started = time.monotonic()

        with pytest.raises(CommandError) as exc_info:
            run_command([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)

        assert time.monotonic() - started < 10
        assert exc_info.value.return_code == -1
        assert "Timed out after 0.5s" in str(exc_info.value)

    def test_failure_raises_with_output(self) -> None:
        script = "import sys; print('out'); sys.stderr.write('boom'); sys.exit(3)"

        with pytest.raises(CommandError) as exc_info:
            run_command([sys.executable, "-c", script])

        err = exc_info.value
        assert err.return_code == 3
        assert err.stderr == "boom"
        assert "exit code 3" in str(err)
        assert "boom" in str(err)
        assert "out" in str(err)


class TestStep:
    def test_wraps_message_in_rules(self) -> None:
        lines = step("npm publish").splitlines()

        assert lines[0] == ""
        assert lines[2] == "npm publish"
        assert lines[1] == lines[3] == "─" * 60
