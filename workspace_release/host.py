"""Facilities the release lifecycle runs against.

The plugin never talks to the terminal or to subprocess directly. It goes
through a :class:`Host`, which owns prompting, output, dry-run handling and
command execution. :class:`ConsoleHost` is the interactive implementation
used by the CLI; tests supply their own.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Protocol, TypeVar

import click

from .errors import PublishFatalError
from .logging import get_logger
from .shell import CommandResult, run_command, step

T = TypeVar("T")

log = get_logger(__name__)


class Host(Protocol):
    """What the lifecycle hooks need from their surroundings."""

    is_dry_run: bool

    def log(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def exec_log(self, message: str) -> None: ...

    def debug(self, event: str, **fields: Any) -> None: ...

    def exec(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        write: bool = True,
        timeout: float | None = None,
    ) -> CommandResult: ...

    def confirm(self, message: str, *, default: bool = True) -> bool: ...

    def prompt(self, message: str) -> str: ...

    def spinner(self, label: str, task: Callable[[], T]) -> T: ...

    def step(
        self, label: str, task: Callable[[], None], *, prompt: str | None = None
    ) -> bool: ...


class ConsoleHost:
    """Terminal host built on click.

    Args:
        dry_run: Echo commands that would modify anything instead of
            running them.
        ci: Never block on user input. Confirmations take their default
            answer and input prompts fail.
    """

    def __init__(self, *, dry_run: bool = False, ci: bool = False) -> None:
        self.is_dry_run = dry_run
        self.ci = ci

    def log(self, message: str) -> None:
        click.echo(message)

    def warn(self, message: str) -> None:
        click.secho(f"WARNING {message}", fg="yellow", err=True)

    def exec_log(self, message: str) -> None:
        click.secho(f"$ {message}", dim=True)

    def debug(self, event: str, **fields: Any) -> None:
        log.debug(event, **fields)

    def exec(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        write: bool = True,
        timeout: float | None = None,
    ) -> CommandResult:
        """Run a command, unless it writes and this is a dry run.

        Commands that are safe in dry-run mode (they only read, or handle
        ``--dry-run`` themselves) pass ``write=False`` and always run.
        """
        self.exec_log(" ".join(args))
        if self.is_dry_run and write:
            return CommandResult(command=list(args))
        return run_command(args, cwd=cwd, timeout=timeout)

    def confirm(self, message: str, *, default: bool = True) -> bool:
        if self.ci:
            return default
        return click.confirm(message, default=default)

    def prompt(self, message: str) -> str:
        if self.ci:
            raise PublishFatalError(f"Cannot prompt in CI mode: {message}")
        return click.prompt(message, type=str)

    def spinner(self, label: str, task: Callable[[], T]) -> T:
        click.echo(step(label))
        return task()

    def step(
        self, label: str, task: Callable[[], None], *, prompt: str | None = None
    ) -> bool:
        """Run ``task`` under a step header, after confirmation if asked.

        Returns:
            False when the user declined the prompt, True otherwise.
        """
        if prompt is not None and not self.confirm(prompt, default=True):
            return False
        self.spinner(label, task)
        return True
