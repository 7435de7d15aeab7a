"""Dependency handling utilities.

Provides functions for parsing PEP 508 dependency strings and rewriting a
package's pyproject.toml after a bump: its own version, and the specifiers of
internal workspace dependencies that were bumped alongside it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

from packaging.requirements import Requirement
from packaging.utils import canonicalize_name

from .toml import load_pyproject, save_pyproject


def dep_canonical_name(dep_str: str) -> str:
    """Extract the canonical package name from a PEP 508 dependency string.

    Examples:
        "requests>=2.0" → "requests"
        "My_Package[extra]~=1.0" → "my-package"
    """
    return canonicalize_name(Requirement(dep_str).name)


def pin_dep(dep_str: str, version: str) -> str:
    """Pin a PEP 508 dependency to an exact version.

    Extras and environment markers are preserved; the version specifier is
    replaced.

    Examples:
        pin_dep("core>=1.0", "2.0.0") → "core==2.0.0"
        pin_dep("core[cli]~=1.0; python_version>'3.9'", "1.0.1")
            → 'core[cli]==1.0.1; python_version > "3.9"'
    """
    req = Requirement(dep_str)
    extras = f"[{','.join(sorted(req.extras))}]" if req.extras else ""
    marker = f"; {req.marker}" if req.marker else ""
    return f"{req.name}{extras}=={version}{marker}"


def rewrite_pyproject(
    pyproject_path: Path,
    new_version: str | None,
    internal_dep_versions: dict[str, str],
) -> None:
    """Update a package's version and re-pin bumped internal dependencies.

    Internal deps are re-pinned wherever they are declared:
    - [project].dependencies
    - [project].optional-dependencies.*
    - [dependency-groups].*

    Args:
        pyproject_path: Path to the pyproject.toml file.
        new_version: New version string, or None to leave it untouched.
        internal_dep_versions: Map of bumped package name → its new version.
    """
    doc = load_pyproject(pyproject_path)
    # Cast needed because tomlkit types are complex unions
    project = cast(dict[str, Any], doc["project"])
    if new_version is not None:
        project["version"] = new_version

    if internal_dep_versions:
        deps = project.get("dependencies")
        if isinstance(deps, list):
            _pin_dep_list(deps, internal_dep_versions)

        opt_deps = project.get("optional-dependencies")
        if isinstance(opt_deps, dict):
            for group in opt_deps.values():
                if isinstance(group, list):
                    _pin_dep_list(group, internal_dep_versions)

        dep_groups = doc.get("dependency-groups")
        if isinstance(dep_groups, dict):
            for group in dep_groups.values():
                if isinstance(group, list):
                    _pin_dep_list(group, internal_dep_versions)

    save_pyproject(pyproject_path, doc)


def _pin_dep_list(deps: list, versions: dict[str, str]) -> None:
    """Pin matching dependency strings in place. Include-group tables are skipped."""
    for i, dep_str in enumerate(deps):
        if not isinstance(dep_str, str):
            continue
        name = dep_canonical_name(dep_str)
        if name in versions:
            deps[i] = pin_dep(dep_str, versions[name])
