"""Bump pipeline: discover → resolve → build tree → apply → lock → commit.

This module orchestrates a bump across the stable and prerelease checkouts:
1. Discover the packages of both workspaces
2. Check both dependency graphs are acyclic
3. Resolve the requested bump instructions
4. Build the bump tree (read-only over both workspaces)
5. Apply the highest bump per package and channel, then re-pin dependents
6. Regenerate the lockfile of every touched workspace
7. Optionally commit each touched checkout

Nothing is written to disk until the tree is fully built.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import BumpError
from .instruction import resolve_instructions
from .models import ReleaseChannel, VersionBump
from .render import render_tree
from .shell import (
    create_and_checkout_branch,
    current_branch,
    is_working_tree_clean,
    run,
    stage_and_commit_all,
    step,
)
from .tree import BumpTree
from .versions import with_prerelease, without_prerelease
from .workspace import Workspace, discover_workspace

logger = logging.getLogger(__name__)

Bumped = dict[ReleaseChannel, dict[str, VersionBump]]


def load_workspaces(
    stable_root: Path, prerelease_root: Path
) -> tuple[Workspace, Workspace]:
    """Discover both checkouts and verify their graphs are acyclic.

    Tool settings come from the stable checkout's root pyproject.toml.

    Raises:
        ConfigError: If either checkout is not a usable uv workspace.
        DependencyCycleError: If either dependency graph has a cycle.
    """
    step("Discovering workspace packages")
    stable = discover_workspace(stable_root, ReleaseChannel.STABLE)
    prerelease = discover_workspace(prerelease_root, ReleaseChannel.PRERELEASE)
    prerelease.config = stable.config

    for workspace in (stable, prerelease):
        workspace.build_order()
        print(f"  {workspace.label}: {len(workspace.packages)} packages")
        for info in workspace:
            deps = f" → [{', '.join(info.deps)}]" if info.deps else ""
            print(f"    {info.name} {info.version} ({info.path}){deps}")

    return stable, prerelease


def build_tree(
    stable: Workspace,
    prerelease: Workspace,
    texts: list[str],
    channel: ReleaseChannel,
) -> BumpTree:
    """Resolve the textual requests and build their bump tree.

    Raises:
        BumpError: If any request fails to resolve.
    """
    label = stable.config.prerelease_label
    instructions = resolve_instructions(
        stable, prerelease, texts, channel, prerelease_label=label
    )
    if not instructions:
        logger.info("All requested bumps are already satisfied")
    return BumpTree(stable, prerelease, instructions, channel, prerelease_label=label)


def apply_tree(tree: BumpTree, stable: Workspace, prerelease: Workspace) -> Bumped:
    """Write the highest bump of every package to its workspace.

    Versions are applied in dependency order, sourced only from the
    highest-bump maps, and each dependent's internal pins are then moved to
    the new versions.

    Returns:
        Per channel, the map of package name → applied VersionBump.
    """
    step("Applying version bumps")
    bumped: Bumped = {}
    for workspace, highest, side in (
        (stable, tree.highest_stable, "stable"),
        (prerelease, tree.highest_prerelease, "prerelease"),
    ):
        changes: dict[str, VersionBump] = {}
        for name in workspace.build_order():
            node = highest.get(name)
            if node is None:
                continue
            instruction = getattr(node, side)
            old = workspace.packages[name].version
            new = str(instruction.next_version)
            workspace.set_version(name, new)
            changes[name] = VersionBump(old=old, new=new)
            print(f"  {side} {name}: {old} → {new}")

        if changes:
            new_versions = {n: b.new for n, b in changes.items()}
            repinned = workspace.repin_dependents(new_versions)
            logger.debug("Re-pinned dependents in %s: %s", workspace.label, repinned)
        bumped[workspace.channel] = changes
    return bumped


def update_lockfile(workspace: Workspace) -> None:
    """Regenerate the workspace lockfile with the configured lock command."""
    if workspace.root is None or not workspace.config.lock_command:
        return
    print(f"  {' '.join(workspace.config.lock_command)} ({workspace.root})")
    run(*workspace.config.lock_command, cwd=workspace.root)


def ensure_clean(*workspaces: Workspace) -> None:
    """Refuse to run a committing bump on top of uncommitted changes.

    Raises:
        BumpError: If any checkout has uncommitted changes.
    """
    dirty = [
        w.label
        for w in workspaces
        if w.root is not None and not is_working_tree_clean(w.root)
    ]
    if dirty:
        raise BumpError(
            f"Uncommitted changes in {', '.join(dirty)}; commit or stash them first"
        )


def commit_bumps(
    workspace: Workspace, changes: dict[str, VersionBump], message: str
) -> None:
    """Commit every change in the workspace checkout with a bump summary."""
    if workspace.root is None:
        return
    summary = "\n".join(f"  {n}: {b.old} → {b.new}" for n, b in changes.items())
    stage_and_commit_all(workspace.root, message, summary)
    print(f"  Committed {workspace.label}")


def run_bump(
    stable_root: Path,
    prerelease_root: Path,
    texts: list[str],
    channel: ReleaseChannel,
    *,
    dry_run: bool = False,
    commit: bool = False,
    update_lock: bool = True,
) -> Bumped:
    """Execute a bump request end to end.

    Args:
        stable_root: Stable channel checkout.
        prerelease_root: Prerelease channel checkout.
        texts: Requests of the form "<package> <major|minor|patch>".
        channel: Channel the requests are aimed at.
        dry_run: Stop after printing the bump tree.
        commit: Commit each touched checkout. For stable requests the
                prerelease checkout first switches to a new propagate branch.
        update_lock: Regenerate lockfiles of touched checkouts.

    Returns:
        The applied bumps per channel (empty for a dry run).
    """
    stable, prerelease = load_workspaces(stable_root, prerelease_root)
    if commit and not dry_run:
        ensure_clean(stable, prerelease)

    step(f"Building bump tree ({channel.value})")
    tree = build_tree(stable, prerelease, texts, channel)
    print(render_tree(tree.root_nodes, tree.highest_stable, tree.highest_prerelease))

    if dry_run:
        step("Dry run: no files changed")
        return {}
    if not tree.bumped_packages:
        step("Nothing to bump")
        return {}

    bumped = apply_tree(tree, stable, prerelease)

    touched = [w for w in (stable, prerelease) if bumped.get(w.channel)]
    if update_lock:
        step("Updating lockfiles")
        for workspace in touched:
            update_lockfile(workspace)

    if commit:
        step("Committing changes")
        request = ", ".join(texts)
        for workspace in touched:
            changes = bumped[workspace.channel]
            if (
                channel is ReleaseChannel.STABLE
                and workspace.channel is ReleaseChannel.PRERELEASE
            ):
                first = tree.root_nodes[0]
                branch = stable.config.propagate_branch.format(
                    package=first.package_name, version=first.stable.next_version
                )
                logger.info(
                    "Creating %s from %s in %s",
                    branch,
                    current_branch(workspace.root),
                    workspace.label,
                )
                create_and_checkout_branch(workspace.root, branch)
                message = f"Propagate stable bump ({request}) to prerelease"
            else:
                message = f"Bump {request} on {workspace.channel.value}"
            commit_bumps(workspace, changes, message)

    print(f"\n{'=' * 60}\nDone!\n{'=' * 60}")
    return bumped


def make_at_least_stable(workspace: Workspace) -> dict[str, VersionBump]:
    """Strip prerelease labels and lift 0.0.x versions to 0.1.0.

    Afterwards every package supports compatible (patch) bumps.
    """
    step(f"Making {workspace.label} versions at least stable")
    changes: dict[str, VersionBump] = {}
    for name in workspace.build_order():
        info = workspace.packages[name]
        current = info.semantic_version
        new = without_prerelease(current)
        if new.major == 0 and new.minor == 0:
            new = new.replace(minor=1, patch=0)
        if new != current:
            workspace.set_version(name, new)
            changes[name] = VersionBump(old=str(current), new=str(new))
            print(f"  {name}: {current} → {new}")
    return changes


def make_prerelease(
    workspace: Workspace, label: str | None = None
) -> dict[str, VersionBump]:
    """Append "-<label>.1" to the version of every package.

    Raises:
        BumpError: If any package already carries a prerelease label.
    """
    label = label or workspace.config.prerelease_label
    already = sorted(
        info.name for info in workspace if info.semantic_version.prerelease
    )
    if already:
        raise BumpError(
            f"Packages already have a prerelease version: {', '.join(already)}. "
            "Check your branch."
        )

    step(f"Making {workspace.label} versions prerelease")
    changes: dict[str, VersionBump] = {}
    for name in workspace.build_order():
        current = workspace.packages[name].semantic_version
        new = with_prerelease(current, f"{label}.1")
        workspace.set_version(name, new)
        changes[name] = VersionBump(old=str(current), new=str(new))
        print(f"  {name}: {current} → {new}")
    return changes
