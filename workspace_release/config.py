"""Release configuration loading.

Options live in the same places the release-it ecosystem looks for them,
under the ``plugins."release-it-yarn-workspaces"`` key:

1. ``.release-it.toml``
2. ``.release-it.json``
3. the ``release-it`` property of the root package.json

The first file that exists wins. The plugin entry may be ``false`` to
disable the plugin entirely.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import ParseError as TOMLParseError

from .errors import ManifestParseError, WorkspaceReleaseError
from .manifest import ManifestFile
from .models import PluginOptions

PLUGIN_NAME = "release-it-yarn-workspaces"
ROOT_MANIFEST = "package.json"


class ConfigError(WorkspaceReleaseError):
    """The release configuration file is unreadable or invalid."""


def _read_release_config(root: Path) -> dict[str, Any]:
    """Return the whole release-it config, or an empty dict if there is none."""
    toml_path = root / ".release-it.toml"
    if toml_path.exists():
        try:
            return tomlkit.parse(toml_path.read_text()).unwrap()
        except TOMLParseError as exc:
            raise ConfigError(f"Failed to parse {toml_path}: {exc}") from exc

    json_path = root / ".release-it.json"
    if json_path.exists():
        try:
            return json.loads(json_path.read_text())
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse {json_path}: {exc}") from exc

    manifest_path = root / ROOT_MANIFEST
    if manifest_path.exists():
        config = ManifestFile.load(manifest_path).data.get("release-it")
        if isinstance(config, dict):
            return config

    return {}


def load_options(root: Path) -> PluginOptions | Literal[False]:
    """Load plugin options for the repository at ``root``.

    Returns:
        The parsed options, or False if the configuration disables the
        plugin.

    Raises:
        ConfigError: If a config file cannot be parsed or the options are
            of the wrong type.
    """
    try:
        config = _read_release_config(root)
    except ManifestParseError as exc:
        raise ConfigError(str(exc)) from exc

    if not isinstance(config, Mapping):
        raise ConfigError(f"Release configuration must be an object, got {config!r}")
    plugins = config.get("plugins", {})
    if not isinstance(plugins, Mapping):
        raise ConfigError(f"`plugins` must be an object, got {plugins!r}")
    raw = plugins.get(PLUGIN_NAME, {})

    if raw is False:
        return False
    if raw is True or raw is None:
        raw = {}

    try:
        return PluginOptions.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid {PLUGIN_NAME} options: {exc}") from exc


def apply_overrides(options: PluginOptions, **overrides: Any) -> PluginOptions:
    """Return a copy of ``options`` with every non-None override applied."""
    update = {key: value for key, value in overrides.items() if value is not None}
    return options.model_copy(update=update)
