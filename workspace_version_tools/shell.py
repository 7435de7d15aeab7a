"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running git and the
lockfile command inside a workspace checkout, plus output formatting helpers.
"""

from __future__ import annotations

import subprocess
from pathlib import Path


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--short").
        cwd: Checkout to run in. Defaults to the current directory.
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=check
    )
    return result.stdout.strip()


def run(
    *args: str, cwd: Path | None = None, check: bool = True
) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary shell command.

    Unlike git(), this doesn't capture output - it streams directly to
    the terminal so users can see lockfile resolution progress.

    Args:
        *args: Command and arguments (e.g., "uv", "lock").
        cwd: Directory to run in. Defaults to the current directory.
        check: If True (default), raise on non-zero exit.
    """
    return subprocess.run(args, cwd=cwd, check=check)


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def is_working_tree_clean(cwd: Path) -> bool:
    """Return True if the checkout at cwd has no uncommitted changes."""
    return not git("status", "--porcelain", cwd=cwd)


def current_branch(cwd: Path) -> str:
    return git("rev-parse", "--abbrev-ref", "HEAD", cwd=cwd)


def create_and_checkout_branch(cwd: Path, branch: str) -> None:
    """Create a new local branch from HEAD and switch to it."""
    git("checkout", "-b", branch, cwd=cwd)


def stage_and_commit_all(cwd: Path, message: str, body: str = "") -> None:
    """Stage every change in the checkout and commit it.

    Raises:
        RuntimeError: If there is nothing to commit.
    """
    git("add", "--all", cwd=cwd)
    staged = git("diff", "--cached", "--name-only", cwd=cwd, check=False)
    if not staged:
        raise RuntimeError(f"No changes to commit in {cwd}")
    if body:
        git("commit", "-m", message, "-m", body, cwd=cwd)
    else:
        git("commit", "-m", message, cwd=cwd)
