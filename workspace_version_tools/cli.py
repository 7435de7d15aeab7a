"""CLI entry point for workspace-version-tools."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any

import click
from packaging.utils import canonicalize_name

from .errors import BumpError, BumpInvariantError, DependencyCycleError
from .models import ReleaseChannel
from .pipeline import make_at_least_stable, make_prerelease, run_bump
from .workspace import discover_workspace

WORKSPACE_PATH = click.Path(exists=True, file_okay=False, path_type=Path)


def _fail_cleanly(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report bump failures as a one-line error instead of a traceback."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (BumpError, BumpInvariantError, DependencyCycleError) as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _bump_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--skip-lock", is_flag=True, help="Do not regenerate lockfiles."
    )(func)
    func = click.option(
        "--commit", is_flag=True, help="Commit the bumps in each touched checkout."
    )(func)
    func = click.option(
        "-d", "--dry-run", is_flag=True, help="Print the bump tree and stop."
    )(func)
    func = click.option(
        "-b",
        "--bump-instruction",
        "instructions",
        multiple=True,
        required=True,
        metavar='"PACKAGE major|minor|patch"',
        help="Package and bump to make to it. Repeatable.",
    )(func)
    return func


@click.group()
@click.version_option(package_name="workspace-version-tools")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
def cli(verbose: bool) -> None:
    """Semver bumps across a uv workspace with stable and prerelease channels."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def bump() -> None:
    """Bump packages and everything that depends on them."""


@bump.command("stable")
@click.option(
    "-w",
    "--workspace",
    type=WORKSPACE_PATH,
    default=".",
    show_default=True,
    help="Stable checkout.",
)
@click.option(
    "-p",
    "--prerelease-workspace",
    type=WORKSPACE_PATH,
    required=True,
    help="Prerelease checkout to keep ahead of stable.",
)
@_bump_options
@_fail_cleanly
def bump_stable(
    workspace: Path,
    prerelease_workspace: Path,
    instructions: tuple[str, ...],
    dry_run: bool,
    commit: bool,
    skip_lock: bool,
) -> None:
    """Bump packages on the stable channel."""
    run_bump(
        workspace,
        prerelease_workspace,
        list(instructions),
        ReleaseChannel.STABLE,
        dry_run=dry_run,
        commit=commit,
        update_lock=not skip_lock,
    )


@bump.command("prerelease")
@click.option(
    "-w",
    "--workspace",
    type=WORKSPACE_PATH,
    default=".",
    show_default=True,
    help="Prerelease checkout.",
)
@click.option(
    "-s",
    "--stable-workspace",
    type=WORKSPACE_PATH,
    required=True,
    help="Stable checkout the prerelease versions are measured against.",
)
@_bump_options
@_fail_cleanly
def bump_prerelease(
    workspace: Path,
    stable_workspace: Path,
    instructions: tuple[str, ...],
    dry_run: bool,
    commit: bool,
    skip_lock: bool,
) -> None:
    """Bump packages on the prerelease channel."""
    run_bump(
        stable_workspace,
        workspace,
        list(instructions),
        ReleaseChannel.PRERELEASE,
        dry_run=dry_run,
        commit=commit,
        update_lock=not skip_lock,
    )


@cli.command("make-at-least-stable")
@click.option("-w", "--workspace", type=WORKSPACE_PATH, default=".", show_default=True)
@_fail_cleanly
def make_at_least_stable_cmd(workspace: Path) -> None:
    """Drop prerelease suffixes and lift 0.0.x versions to 0.1.0."""
    changes = make_at_least_stable(discover_workspace(workspace))
    click.echo(f"✓ Updated {len(changes)} packages")


@cli.command("make-prerelease")
@click.option("-w", "--workspace", type=WORKSPACE_PATH, default=".", show_default=True)
@click.option("--label", default=None, help="Prerelease label (default: from config).")
@_fail_cleanly
def make_prerelease_cmd(workspace: Path, label: str | None) -> None:
    """Append a '-<label>.1' prerelease suffix to every package version."""
    ws = discover_workspace(workspace, ReleaseChannel.PRERELEASE)
    changes = make_prerelease(ws, label)
    click.echo(f"✓ Updated {len(changes)} packages")


@cli.command()
@click.option("-w", "--workspace", type=WORKSPACE_PATH, default=".", show_default=True)
@click.option(
    "-p",
    "--prerelease-workspace",
    type=WORKSPACE_PATH,
    default=None,
    help="Also list the prerelease checkout.",
)
@click.option(
    "--package",
    default=None,
    help="Only list this package, what it depends on and what depends on it.",
)
@_fail_cleanly
def show(
    workspace: Path, prerelease_workspace: Path | None, package: str | None
) -> None:
    """List packages in dependency order and what a bump of each reaches."""
    checkouts = [discover_workspace(workspace)]
    if prerelease_workspace is not None:
        checkouts.append(
            discover_workspace(prerelease_workspace, ReleaseChannel.PRERELEASE)
        )
    focus = canonicalize_name(package) if package else None
    for ws in checkouts:
        click.echo(ws.label)
        if focus is not None and focus not in ws:
            click.echo(f"  {focus} is not in this workspace")
            continue
        related: set[str] | None = None
        if focus is not None:
            related = {focus} | ws.all_dependencies(focus) | ws.all_dependents(focus)
        for name in ws.build_order():
            if related is not None and name not in related:
                continue
            info = ws.packages[name]
            deps = ws.dependencies(name)
            reach = sorted(ws.all_dependents(name))
            line = f"  {name} {info.version} ({info.path})"
            if deps:
                line += f" ← [{', '.join(deps)}]"
            if reach:
                line += f" → bumps reach [{', '.join(reach)}]"
            click.echo(line)
