"""Version parsing utilities.

Wraps the ``semver`` package with the lenient coercion npm tooling relies
on: ``"v2"`` → ``"2.0.0"``, ``"^1.2.3"`` → ``"1.2.3"``,
and ``"1.0.0-beta"`` keeps its pre-release.
"""

from __future__ import annotations

import re

import semver

from .errors import InvalidVersionError
from .models import ParsedVersion

# First run of up to three dot-separated numbers not embedded in a longer
# number, e.g. "1.2.3" in "^1.2.3" or "2" in "v2-beta".
COERCE_RE = re.compile(r"(?:^|[^\d])(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?(?:$|[^\d])")


def strip_v(raw: str) -> str:
    """Drop one leading "v", which npm accepts on otherwise valid versions."""
    return raw[1:] if raw.startswith("v") else raw


def coerce(raw: str) -> semver.Version | None:
    """Extract a ``major.minor.patch`` version from an arbitrary string.

    Missing components default to zero and any pre-release or build
    suffix is dropped. Returns None when the string contains no number.

    Examples:
        "^1.2.3" → 1.2.3
        "v2" → 2.0.0
        "workspace:*" → None
    """
    match = COERCE_RE.search(raw)
    if not match:
        return None
    major, minor, patch = (int(part or 0) for part in match.groups())
    return semver.Version(major, minor, patch)


def parse_version(raw: str | None) -> ParsedVersion:
    """Parse a release version and classify it for dist-tag selection.

    Valid versions are used as-is; anything else goes through
    :func:`coerce`, which drops pre-release information.

    Examples:
        "" → version=None, is_prerelease=False
        "2.0.0-beta.1" → is_prerelease=True, prerelease_id="beta"
        "v2.0.0-rc.1" → is_prerelease=True, prerelease_id="rc"
        "2.0.0-2" → is_prerelease=True, prerelease_id=None

    Raises:
        InvalidVersionError: If no version can be extracted from ``raw``.
    """
    if not raw:
        return ParsedVersion()

    cleaned = strip_v(raw)
    if semver.Version.is_valid(cleaned):
        version = semver.Version.parse(cleaned)
    else:
        version = coerce(raw)
        if version is None:
            raise InvalidVersionError(f"Invalid version: {raw!r}")

    prerelease = version.prerelease or ""
    is_prerelease = bool(prerelease)
    first = prerelease.split(".")[0] if is_prerelease else ""
    prerelease_id = first if first and not first.isdigit() else None

    return ParsedVersion(
        version=str(version),
        is_prerelease=is_prerelease,
        prerelease_id=prerelease_id,
    )
