"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from workspace_release.errors import CommandError
from workspace_release.shell import CommandResult


class FakeHost:
    """Scripted stand-in for the console host.

    ``failures`` are consumed one per command in order: an exception is
    raised, None means the command succeeds. ``handler`` (if given) is
    called for every command instead and may raise.
    """

    def __init__(
        self,
        *,
        dry_run: bool = False,
        failures: Sequence[BaseException | None] = (),
        answers: Sequence[str] = (),
        confirms: Sequence[bool] = (),
        handler: Callable[[list[str]], None] | None = None,
    ) -> None:
        self.is_dry_run = dry_run
        self.failures = list(failures)
        self.answers = list(answers)
        self.confirms = list(confirms)
        self.handler = handler
        self.commands: list[list[str]] = []
        self.cwds: list[Path | None] = []
        self.writes: list[bool] = []
        self.timeouts: list[float | None] = []
        self.logs: list[str] = []
        self.warnings: list[str] = []
        self.exec_logs: list[str] = []
        self.prompts: list[str] = []
        self.confirmations: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.labels: list[str] = []

    def log(self, message: str) -> None:
        self.logs.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def exec_log(self, message: str) -> None:
        self.exec_logs.append(message)

    def debug(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def exec(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        write: bool = True,
        timeout: float | None = None,
    ) -> CommandResult:
        self.commands.append(list(args))
        self.cwds.append(cwd)
        self.writes.append(write)
        self.timeouts.append(timeout)
        if self.handler is not None:
            self.handler(list(args))
        elif self.failures:
            failure = self.failures.pop(0)
            if failure is not None:
                raise failure
        return CommandResult(command=list(args))

    def confirm(self, message: str, *, default: bool = True) -> bool:
        self.confirmations.append(message)
        return self.confirms.pop(0) if self.confirms else default

    def prompt(self, message: str) -> str:
        self.prompts.append(message)
        return self.answers.pop(0)

    def spinner(self, label: str, task: Callable[[], Any]) -> Any:
        self.labels.append(label)
        return task()

    def step(
        self, label: str, task: Callable[[], None], *, prompt: str | None = None
    ) -> bool:
        if prompt is not None and not self.confirm(prompt):
            return False
        self.spinner(label, task)
        return True


def npm_error(message: str, return_code: int = 1) -> CommandError:
    """A failed npm command whose stderr carries ``message``."""
    return CommandError(["npm"], return_code, stderr=message)


def write_json(path: Path, data: dict[str, Any], indent: int = 2) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=indent) + "\n")
    return path


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def workspace_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A yarn workspace with packages a and b, where b depends on a.

    The current directory is switched to the repository root.
    """
    write_json(
        tmp_path / "package.json",
        {"name": "root", "private": True, "workspaces": ["packages/*"]},
    )
    write_json(tmp_path / "packages" / "a" / "package.json", {"name": "a", "version": "1.0.0"})
    write_json(
        tmp_path / "packages" / "b" / "package.json",
        {
            "name": "b",
            "version": "1.0.0",
            "dependencies": {"a": "^1.0.0", "lodash": "^4.17.21"},
        },
    )
    monkeypatch.chdir(tmp_path)
    return tmp_path
