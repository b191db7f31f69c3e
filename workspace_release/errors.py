"""Error types raised by workspace-release.

Configuration and discovery errors abort the run before anything is
written. Publish errors are split into the two recoverable kinds (OTP and
access) that the publish loop handles interactively, and a fatal kind that
stops the remaining publishes.
"""

from __future__ import annotations

from collections.abc import Sequence


class WorkspaceReleaseError(Exception):
    """Base class for all workspace-release errors."""


class ManifestNotFoundError(WorkspaceReleaseError):
    """A package.json file does not exist."""


class ManifestParseError(WorkspaceReleaseError):
    """A package.json file is not a valid JSON object."""


class WorkspacesNotConfiguredError(WorkspaceReleaseError):
    """The root manifest has no usable `workspaces` property."""

    def __init__(self) -> None:
        super().__init__(
            "This package doesn't use yarn workspaces. "
            "(package.json doesn't contain a `workspaces` property)"
        )


class InvalidVersionError(WorkspaceReleaseError):
    """A version string could not be coerced to a semantic version."""


class RegistryTimeoutError(WorkspaceReleaseError):
    """The registry did not answer the preflight checks in time."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"Unable to reach npm registry (timed out after {timeout}s).")


class RegistryAuthError(WorkspaceReleaseError):
    """`npm whoami` failed, so publishing would fail too."""

    def __init__(self) -> None:
        super().__init__("Not authenticated with npm. Please `npm login` and try again.")


class PublishError(WorkspaceReleaseError):
    """Base class for failures of `npm publish`."""


class PublishOtpError(PublishError):
    """The registry asked for a (new) one-time password."""


class PublishAccessError(PublishError):
    """A scoped package was published without `--access public`."""


class PublishFatalError(PublishError):
    """Any other publish failure."""


class CommandError(WorkspaceReleaseError):
    """An external command exited with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        return_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = list(command)
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr
        output = "\n".join(part for part in (stderr.strip(), stdout.strip()) if part)
        message = f"Command failed with exit code {return_code}: {' '.join(self.command)}"
        if output:
            message = f"{message}\n{output}"
        super().__init__(message)
