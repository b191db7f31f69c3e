"""Publishing workspaces with `npm publish`.

Each workspace goes through a small state machine::

    PENDING → ATTEMPTING → SUCCEEDED
                        → SKIPPED_PRIVATE
                        → AWAITING_OTP → ATTEMPTING
                        → AWAITING_ACCESS_DECISION → ATTEMPTING | FAILED
                        → (fatal error raised)

The one-time password lives in a :class:`SharedOtp` that is passed to every
publish of a release, so the user is asked once and the answer is reused
for the remaining packages until the registry rejects it.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import (
    CommandError,
    PublishAccessError,
    PublishError,
    PublishFatalError,
    PublishOtpError,
)
from .host import Host
from .models import WorkspaceInfo

OTP_ERROR_RE = re.compile(r"one-time pass")
PRIVATE_PACKAGES_RE = re.compile(r"private packages")

OTP_PROMPT = "Please enter OTP for npm:"


class PublishState(str, Enum):
    PENDING = "pending"
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    SKIPPED_PRIVATE = "skipped-private"
    AWAITING_OTP = "awaiting-otp"
    AWAITING_ACCESS_DECISION = "awaiting-access-decision"
    FAILED = "failed"


@dataclass
class SharedOtp:
    """Mutable OTP holder shared by all publishes of one release."""

    value: str | None = None


def publish_as_public_prompt(name: str) -> str:
    return (
        f"Publishing {name} failed because `publishConfig.access` is not set in its "
        f"`package.json`.\n  Would you like to publish {name} as a public package?"
    )


def build_publish_command(
    tag: str,
    *,
    access: str | None = None,
    otp: str | None = None,
    dry_run: bool = False,
) -> list[str]:
    """Build the `npm publish` invocation for the current package directory."""
    args = ["npm", "publish", ".", "--tag", tag]
    if access:
        args += ["--access", access]
    if otp:
        args += ["--otp", otp]
    if dry_run:
        args.append("--dry-run")
    return args


def classify_publish_error(err: CommandError, workspace: WorkspaceInfo) -> PublishError:
    """Map a failed `npm publish` to the error kind that decides what happens next."""
    message = str(err)
    if OTP_ERROR_RE.search(message):
        return PublishOtpError(message)
    if workspace.name.startswith("@") and PRIVATE_PACKAGES_RE.search(message):
        return PublishAccessError(message)
    return PublishFatalError(message)


def _transition(host: Host, workspace: WorkspaceInfo, state: PublishState) -> None:
    host.debug("publish_state", workspace=workspace.name, state=state.value)


def publish_workspace(
    host: Host,
    workspace: WorkspaceInfo,
    *,
    tag: str,
    otp: SharedOtp,
    access: str | None = None,
) -> PublishState:
    """Publish one workspace, recovering from OTP and access errors.

    Args:
        host: Runs the command and asks the user questions.
        workspace: The package to publish. Marked as released on success.
        tag: Dist-tag to publish under.
        otp: OTP holder shared with the other publishes of this release.
        access: Initial ``--access`` value, if any.

    Returns:
        The terminal state: SUCCEEDED, SKIPPED_PRIVATE or FAILED (the user
        declined to publish a scoped package as public).

    Raises:
        PublishFatalError: For any failure that is not an OTP or access
            problem. The remaining workspaces are not published.
    """
    if workspace.is_private:
        host.warn(f"{workspace.name}: Skip publish (package is private)")
        return PublishState.SKIPPED_PRIVATE

    while True:
        _transition(host, workspace, PublishState.ATTEMPTING)
        args = build_publish_command(
            tag, access=access, otp=otp.value, dry_run=host.is_dry_run
        )
        try:
            # npm handles --dry-run itself, so the command always runs.
            host.exec(args, cwd=workspace.root, write=False)
        except CommandError as err:
            host.debug("publish_failed", workspace=workspace.name, error=str(err))
            error = classify_publish_error(err, workspace)

            if isinstance(error, PublishOtpError):
                _transition(host, workspace, PublishState.AWAITING_OTP)
                if otp.value is not None:
                    host.warn("The provided OTP is incorrect or has expired.")
                otp.value = host.prompt(OTP_PROMPT)
                continue

            if isinstance(error, PublishAccessError):
                _transition(host, workspace, PublishState.AWAITING_ACCESS_DECISION)
                if host.confirm(publish_as_public_prompt(workspace.name), default=False):
                    access = "public"
                    continue
                host.warn(f"{workspace.name} was not published.")
                _transition(host, workspace, PublishState.FAILED)
                return PublishState.FAILED

            raise error from err

        workspace.is_released = True
        _transition(host, workspace, PublishState.SUCCEEDED)
        return PublishState.SUCCEEDED


def each_workspace(
    workspaces: Iterable[WorkspaceInfo],
    root: Path,
    action: Callable[[WorkspaceInfo], None],
) -> None:
    """Run ``action`` for every workspace from inside its directory.

    The working directory is set back to ``root`` after each workspace,
    including when ``action`` raises.
    """
    for workspace in workspaces:
        try:
            os.chdir(workspace.root)
            action(workspace)
        finally:
            os.chdir(root)
