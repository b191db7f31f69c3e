"""Dependency handling utilities.

Rewrites the version specifiers of intra-workspace dependencies so that
sibling packages keep depending on each other after a lockstep bump.
"""

from __future__ import annotations

from collections.abc import Collection, MutableMapping

import semver

from .versions import coerce, strip_v

DEPENDENCY_FIELDS = (
    "dependencies",
    "devDependencies",
    "optionalDependencies",
    "peerDependencies",
)


def replacement_dependency_version(existing: str, new_version: str) -> str:
    """Build the specifier that replaces ``existing`` after a bump.

    Exact versions are replaced outright. Ranges keep their operator and
    any other surrounding text; only the version inside is swapped.
    Specifiers without a version in them fall back to the bare version.

    Examples:
        ("1.2.3", "2.0.0") → "2.0.0"
        ("v1.2.3", "2.0.0") → "2.0.0"
        ("^1.2.3", "2.0.0") → "^2.0.0"
        ("workspace:~1.2.3", "2.0.0") → "workspace:~2.0.0"
        ("workspace:*", "2.0.0") → "2.0.0"
    """
    if semver.Version.is_valid(strip_v(existing)):
        return new_version

    coerced = coerce(existing)
    if coerced is not None:
        # A partial range such as "^1.2" coerces to "1.2.0", which is not a
        # substring; the specifier is then left as it was.
        return existing.replace(str(coerced), new_version)

    return new_version


def update_dependencies(
    dependencies: MutableMapping[str, str] | None,
    workspace_names: Collection[str],
    new_version: str,
) -> list[str]:
    """Rewrite, in place, every dependency that names a sibling workspace.

    Args:
        dependencies: One dependency map of a manifest, or None if the
            manifest does not have that field.
        workspace_names: Names of all packages in the workspace.
        new_version: Version every workspace is being bumped to.

    Returns:
        Names of the dependencies that were rewritten.
    """
    if not dependencies:
        return []

    updated: list[str] = []
    for name, existing in dependencies.items():
        if name in workspace_names:
            dependencies[name] = replacement_dependency_version(existing, new_version)
            updated.append(name)
    return updated
