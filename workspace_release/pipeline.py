"""Release pipeline: init → bump → release → after-release.

This module holds the lifecycle hooks of a lockstep workspace release:
1. ``init``: check the registry is reachable and the user is logged in
2. ``bump``: set every workspace (and every sibling dependency) to the
   new version, keeping each package.json's formatting
3. ``release``: `npm publish` every public workspace under one dist-tag
4. ``after_release``: print the registry page of every published package

The hooks share state through a :class:`ReleaseContext` and a single
:class:`WorkspaceRegistry`, so a package marked as released while
publishing is still marked when the URLs are printed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from .deps import DEPENDENCY_FIELDS, update_dependencies
from .host import Host
from .manifest import ManifestFile
from .models import PluginOptions, ReleaseContext, WorkspaceInfo
from .publish import PublishState, SharedOtp, each_workspace, publish_workspace
from .registry import check_registry, get_registry, get_release_url
from .versions import parse_version
from .workspaces import WorkspaceRegistry, resolve_workspaces

ROOT_MANIFEST_PATH = "package.json"
DEFAULT_TAG = "latest"


def resolve_dist_tag(version: str | None, dist_tag: str | None = None) -> str:
    """Pick the dist-tag a version is published under.

    An explicit tag always wins. Otherwise pre-releases are tagged with
    their identifier ("1.0.0-beta.1" → "beta") and everything else,
    including numeric-only pre-releases, goes to "latest".
    """
    if dist_tag:
        return dist_tag
    parsed = parse_version(version)
    if parsed.is_prerelease and parsed.prerelease_id:
        return parsed.prerelease_id
    return DEFAULT_TAG


def format_publish_message(dist_tag: str | None, package_names: Sequence[str]) -> str:
    """Build the confirmation shown before anything is published."""
    suffix = "" if dist_tag == DEFAULT_TAG else f"@{dist_tag}"
    lines = [
        "Preparing to publish:",
        *(f"    {name}{suffix}" for name in package_names),
        "  Publish to npm:",
    ]
    return "\n".join(lines)


class WorkspacesPlugin:
    """Lifecycle hooks for releasing every workspace of a monorepo together.

    Args:
        host: Output, prompts, dry-run and command execution.
        options: Plugin options (see :class:`PluginOptions`).
        root: Repository root. Defaults to the current directory.
    """

    def __init__(
        self,
        host: Host,
        options: PluginOptions | None = None,
        root: Path | None = None,
    ) -> None:
        self.host = host
        self.options = options or PluginOptions()
        root = (root or Path.cwd()).resolve()

        root_manifest = ManifestFile.load(root / ROOT_MANIFEST_PATH)
        workspaces = self.options.workspaces or resolve_workspaces(
            root_manifest.data.get("workspaces")
        )
        self.context = ReleaseContext(
            publish_config=root_manifest.data.get("publishConfig") or {},
            workspaces=workspaces,
            root=root,
        )
        self.registry = WorkspaceRegistry()

    @staticmethod
    def is_enabled(options: Any, root: Path | None = None) -> bool:
        """Whether the plugin applies to the repository at ``root``."""
        manifest = (root or Path.cwd()) / ROOT_MANIFEST_PATH
        return manifest.exists() and options is not False

    def get_workspaces(self) -> tuple[WorkspaceInfo, ...]:
        return self.registry.discover(self.context.root, self.context.workspaces)

    def get_registry(self) -> str:
        return get_registry(self.context.publish_config)

    def resolve_dist_tag(self, version: str | None) -> str:
        return resolve_dist_tag(version, self.options.dist_tag)

    def format_publish_message(self, dist_tag: str | None, names: Sequence[str]) -> str:
        return format_publish_message(dist_tag, names)

    def init(self) -> None:
        """Fail early if publishing could not possibly succeed."""
        if self.options.skip_checks:
            return
        check_registry(self.host, self.get_registry())

    def bump(self, version: str) -> None:
        """Set ``version`` on every workspace and on their sibling dependencies."""
        dist_tag = self.resolve_dist_tag(version)
        workspaces = self.get_workspaces()
        package_names = [w.name for w in workspaces]

        self.context.dist_tag = dist_tag
        self.context.version = version
        self.context.package_names = package_names

        def task() -> None:
            if self.host.is_dry_run:
                self.host.exec_log(f"Bumping versions in {', '.join(package_names)}")
                return

            for workspace in workspaces:
                self._bump_workspace(workspace, version, package_names)

        self.host.spinner("npm version", task)

    def _bump_workspace(
        self, workspace: WorkspaceInfo, version: str, package_names: list[str]
    ) -> None:
        manifest = workspace.manifest
        if manifest.data.get("version") == version:
            self.host.warn(
                f"Did not update version in package.json, etc. (already at {version})."
            )
        manifest.data["version"] = version

        for field in DEPENDENCY_FIELDS:
            updated = update_dependencies(manifest.data.get(field), package_names, version)
            if updated:
                self.host.debug(
                    "dependencies_updated", workspace=workspace.name, field=field, names=updated
                )

        manifest.write()

    def use_current_version(self) -> str | None:
        """Fill in the release context from the manifests as they are on disk.

        Used when publishing without bumping first.
        """
        workspaces = self.get_workspaces()
        version = next((w.manifest.version for w in workspaces if w.manifest.version), None)
        self.context.version = version
        self.context.dist_tag = self.resolve_dist_tag(version)
        self.context.package_names = [w.name for w in workspaces]
        return version

    def release(self) -> None:
        """Publish every workspace after the user confirms the list."""
        if self.options.publish is False:
            return

        tag = self.context.dist_tag or DEFAULT_TAG
        if not self.context.package_names:
            self.context.package_names = [w.name for w in self.get_workspaces()]

        # One holder for the whole release, so a single prompt covers every
        # package until the registry rejects the OTP.
        otp = SharedOtp(value=self.options.otp)

        def task() -> None:
            self.each_workspace(
                lambda workspace: self.publish(tag=tag, workspace=workspace, otp=otp)
            )

        self.host.step(
            "npm publish",
            task,
            prompt=self.format_publish_message(tag, self.context.package_names),
        )

    def publish(
        self,
        *,
        tag: str,
        workspace: WorkspaceInfo,
        otp: SharedOtp,
        access: str | None = None,
    ) -> PublishState:
        return publish_workspace(self.host, workspace, tag=tag, otp=otp, access=access)

    def each_workspace(self, action: Callable[[WorkspaceInfo], None]) -> None:
        each_workspace(self.get_workspaces(), self.context.root, action)

    def after_release(self) -> list[str]:
        """Print and return the registry page of every published workspace."""
        registry = self.get_registry()
        urls = [
            get_release_url(registry, w.name)
            for w in self.get_workspaces()
            if w.is_released
        ]
        for url in urls:
            self.host.log(f"🔗 {url}")
        return urls


def run_release(
    version: str,
    host: Host,
    options: PluginOptions | None = None,
    root: Path | None = None,
) -> WorkspacesPlugin:
    """Execute the full release lifecycle.

    Args:
        version: Version every workspace is released as.
        host: Host to run against.
        options: Plugin options.
        root: Repository root. Defaults to the current directory.

    Returns:
        The plugin, for inspecting the run's context and workspaces.
    """
    plugin = WorkspacesPlugin(host, options, root)
    plugin.init()
    plugin.bump(version)
    plugin.release()
    plugin.after_release()
    return plugin
