"""Data models for workspace-release.

These Pydantic models represent the core data structures shared by the
bump and publish steps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .manifest import ManifestFile


class PluginOptions(BaseModel):
    """User-facing options, as written in the release configuration.

    Attributes:
        workspaces: Glob list overriding the root manifest's `workspaces`.
        dist_tag: Force this dist-tag instead of deriving it from the version.
        otp: One-time password to use for the first publish attempt.
        skip_checks: Skip the registry reachability and auth preflight.
        publish: Set to False to bump versions without publishing.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    workspaces: list[str] | None = None
    dist_tag: str | None = Field(default=None, alias="distTag")
    otp: str | None = None
    skip_checks: bool = Field(default=False, alias="skipChecks")
    publish: bool = True

    @field_validator("otp", mode="before")
    @classmethod
    def _otp_as_string(cls, value: Any) -> Any:
        # OTPs are all digits, so JSON/TOML configs tend to store numbers.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ParsedVersion(BaseModel):
    """A release version classified for dist-tag selection."""

    version: str | None = None
    is_prerelease: bool = False
    prerelease_id: str | None = None


class WorkspaceInfo(BaseModel):
    """A single package discovered in the workspace.

    Attributes:
        name: Package name from its package.json.
        root: Absolute path of the package directory.
        relative_root: Package directory relative to the repository root.
        is_private: True when the manifest sets ``"private": true``.
        is_released: Flipped to True once `npm publish` succeeds.
        manifest: The loaded package.json this workspace owns.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    root: Path
    relative_root: Path
    is_private: bool = False
    is_released: bool = False
    manifest: ManifestFile


class ReleaseContext(BaseModel):
    """Run state filled in as the lifecycle progresses.

    ``publish_config``, ``workspaces`` and ``root`` are known up front;
    ``dist_tag``, ``version`` and ``package_names`` are set by the bump step.
    """

    publish_config: dict[str, Any] = Field(default_factory=dict)
    workspaces: list[str] = Field(default_factory=list)
    root: Path
    dist_tag: str | None = None
    version: str | None = None
    package_names: list[str] = Field(default_factory=list)
