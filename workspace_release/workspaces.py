"""Workspace discovery.

Finds every package.json matched by the workspace globs and keeps one
:class:`WorkspaceInfo` per package for the rest of the run. The same
objects are handed to the bump, publish and after-release steps, so a
workspace marked as released during publishing stays marked.
"""

from __future__ import annotations

import glob
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .errors import WorkspacesNotConfiguredError
from .logging import get_logger
from .manifest import ManifestFile
from .models import WorkspaceInfo

log = get_logger(__name__)


def resolve_workspaces(workspaces: Any) -> list[str]:
    """Extract the workspace globs from a root manifest's `workspaces` value.

    Accepts both shapes yarn understands: a plain list of globs, or an
    object with a ``packages`` list (used alongside ``nohoist``).

    Raises:
        WorkspacesNotConfiguredError: If neither shape is present.
    """
    if isinstance(workspaces, list):
        return list(workspaces)
    if isinstance(workspaces, Mapping) and isinstance(workspaces.get("packages"), list):
        return list(workspaces["packages"])
    raise WorkspacesNotConfiguredError()


def find_manifests(root: Path, globs: Sequence[str]) -> list[Path]:
    """Expand workspace globs to package.json paths relative to ``root``.

    Each glob is matched with ``/package.json`` appended. Matches of one
    glob are sorted; globs keep the order they were configured in, and a
    manifest matched by several globs is only returned once.
    """
    found: list[Path] = []
    seen: set[Path] = set()
    for pattern in globs:
        pattern = pattern.rstrip("/")
        if pattern.startswith("./"):
            pattern = pattern[2:]
        matches = glob.glob(f"{pattern}/package.json", root_dir=root, recursive=True)
        for match in sorted(matches):
            relative = Path(match)
            if "node_modules" in relative.parts or relative in seen:
                continue
            seen.add(relative)
            found.append(relative)
    return found


class WorkspaceRegistry:
    """Single source of truth for the workspaces of one run.

    :meth:`discover` does the filesystem scan once; every later call
    returns the very same tuple of :class:`WorkspaceInfo` objects.
    """

    def __init__(self) -> None:
        self._workspaces: tuple[WorkspaceInfo, ...] | None = None

    @property
    def is_discovered(self) -> bool:
        return self._workspaces is not None

    def discover(self, root: Path, globs: Sequence[str]) -> tuple[WorkspaceInfo, ...]:
        """Scan ``root`` for workspace manifests and cache the result."""
        if self._workspaces is not None:
            return self._workspaces

        workspaces: list[WorkspaceInfo] = []
        for relative_manifest in find_manifests(root, globs):
            manifest = ManifestFile.load(root / relative_manifest)
            relative_root = relative_manifest.parent
            workspaces.append(
                WorkspaceInfo(
                    name=manifest.name or relative_root.name,
                    root=root / relative_root,
                    relative_root=relative_root,
                    is_private=bool(manifest.data.get("private")),
                    manifest=manifest,
                )
            )

        log.debug(
            "discovered_workspaces",
            root=str(root),
            globs=list(globs),
            names=[w.name for w in workspaces],
        )
        self._workspaces = tuple(workspaces)
        return self._workspaces

    @property
    def workspaces(self) -> tuple[WorkspaceInfo, ...]:
        if self._workspaces is None:
            raise RuntimeError("Workspaces have not been discovered yet")
        return self._workspaces

    @property
    def names(self) -> list[str]:
        return [w.name for w in self.workspaces]

    def find_by_name(self, name: str) -> WorkspaceInfo | None:
        for workspace in self.workspaces:
            if workspace.name == name:
                return workspace
        return None

    def released(self) -> list[WorkspaceInfo]:
        return [w for w in self.workspaces if w.is_released]
