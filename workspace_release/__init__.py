"""Lockstep version bumping and npm publishing for yarn/npm workspaces."""

from workspace_release.pipeline import WorkspacesPlugin, run_release

__all__ = ["WorkspacesPlugin", "run_release"]
