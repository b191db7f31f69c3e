"""CLI entry point for workspace-release."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any

import click

from .config import apply_overrides, load_options
from .errors import WorkspaceReleaseError
from .host import ConsoleHost
from .logging import configure_logging
from .models import PluginOptions
from .pipeline import WorkspacesPlugin, run_release


def release_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that runs lifecycle hooks."""
    options = [
        click.option("--dry-run", is_flag=True, help="Show what would happen without writing."),
        click.option("--ci", is_flag=True, help="Never prompt; take default answers."),
        click.option("--dist-tag", default=None, help="Publish under this dist-tag."),
        click.option("--otp", default=None, help="One-time password for the first publish."),
        click.option(
            "--skip-checks",
            is_flag=True,
            help="Skip the registry reachability and auth checks.",
        ),
        click.option(
            "--no-publish",
            "no_publish",
            is_flag=True,
            help="Bump versions without publishing.",
        ),
        click.option(
            "-w",
            "--workspace",
            "workspaces",
            multiple=True,
            help="Workspace glob (repeatable). Overrides package.json `workspaces`.",
        ),
        click.option("-v", "--verbose", is_flag=True, help="Show debug logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report library errors as clean CLI failures."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except WorkspaceReleaseError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _setup(
    *,
    dry_run: bool,
    ci: bool,
    dist_tag: str | None,
    otp: str | None,
    skip_checks: bool,
    no_publish: bool,
    workspaces: tuple[str, ...],
    verbose: bool,
) -> tuple[ConsoleHost, PluginOptions, Path]:
    """Load configuration, apply CLI overrides and build the host."""
    configure_logging(verbose=verbose)
    root = Path.cwd()

    options = load_options(root)
    if options is False or not WorkspacesPlugin.is_enabled(options, root):
        raise click.ClickException(
            "Nothing to do: no package.json in the current directory, "
            "or the plugin is disabled in the release configuration."
        )

    options = apply_overrides(
        options,
        dist_tag=dist_tag,
        otp=otp,
        skip_checks=True if skip_checks else None,
        publish=False if no_publish else None,
        workspaces=list(workspaces) or None,
    )
    return ConsoleHost(dry_run=dry_run, ci=ci), options, root


@click.group()
@click.version_option(package_name="workspace-release")
def cli() -> None:
    """Bump and publish every package of a yarn/npm workspace in lockstep."""


@cli.command()
@click.argument("version")
@release_options
@handle_errors
def release(version: str, **kwargs: Any) -> None:
    """Run the full release: checks, bump to VERSION, publish, report."""
    host, options, root = _setup(**kwargs)
    run_release(version, host, options, root)


@cli.command()
@click.argument("version")
@release_options
@handle_errors
def bump(version: str, **kwargs: Any) -> None:
    """Set every workspace and sibling dependency to VERSION."""
    host, options, root = _setup(**kwargs)
    plugin = WorkspacesPlugin(host, options, root)
    plugin.bump(version)
    if not host.is_dry_run:
        names = ", ".join(plugin.context.package_names)
        click.echo(f"✓ {names} → {version} ({plugin.context.dist_tag})")


@cli.command()
@release_options
@handle_errors
def publish(**kwargs: Any) -> None:
    """Publish every workspace at its current version."""
    host, options, root = _setup(**kwargs)
    plugin = WorkspacesPlugin(host, options, root)
    plugin.init()
    plugin.use_current_version()
    plugin.release()
    plugin.after_release()
