"""Shell utilities.

Provides a thin wrapper around subprocess for running external commands
(npm), plus output formatting helpers.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import CommandError
from .logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a successful command."""

    command: list[str]
    stdout: str = ""
    stderr: str = ""


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | str | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run a command and capture its output.

    Args:
        args: Command and arguments (e.g., "npm", "publish", ".").
        cwd: Directory to run the command in. Defaults to the current
             working directory.
        timeout: Seconds to wait before the command is killed. None waits
             forever.

    Returns:
        CommandResult with the captured stdout and stderr.

    Raises:
        CommandError: If the command exits with a non-zero status or is
            killed after ``timeout``.
    """
    command = list(args)
    log.debug("run_command", cmd=" ".join(command), cwd=str(cwd or "."))
    try:
        result = subprocess.run(
            command, cwd=cwd, capture_output=True, text=True, timeout=timeout
        )
    except subprocess.TimeoutExpired as exc:
        log.debug("command_timed_out", cmd=" ".join(command), timeout=timeout)
        raise CommandError(
            command, -1, stderr=f"Timed out after {timeout}s"
        ) from exc
    if result.returncode != 0:
        log.debug("command_failed", cmd=" ".join(command), return_code=result.returncode)
        raise CommandError(command, result.returncode, result.stdout, result.stderr)
    return CommandResult(command=command, stdout=result.stdout, stderr=result.stderr)


def step(msg: str) -> str:
    """Format a visually distinct step header.

    Used to separate the phases of a release in terminal output.
    """
    return f"\n{'─' * 60}\n{msg}\n{'─' * 60}"
