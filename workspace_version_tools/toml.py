"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying pyproject.toml
files. This is important for keeping version bump commits small and readable.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from packaging.utils import canonicalize_name
from pydantic import ValidationError

from .errors import ConfigError
from .models import ToolConfig

TOOL_TABLE = "workspace-version-tools"


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.
    """
    return tomlkit.parse(path.read_text())


def save_pyproject(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_project_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract the canonical package name from [project].name.

    Names are normalized per PEP 503 (lowercase, hyphens instead of
    underscores) for consistent comparison.

    Args:
        doc: Parsed pyproject.toml document.
        fallback: Value to use if name is not specified.
    """
    return canonicalize_name(doc.get("project", {}).get("name", fallback))


def get_project_version(doc: tomlkit.TOMLDocument) -> str:
    """Extract version from [project].version, defaulting to '0.0.0'."""
    return str(doc.get("project", {}).get("version", "0.0.0"))


def get_runtime_dependency_strings(doc: tomlkit.TOMLDocument) -> list[str]:
    """Collect the non-development dependency strings from a pyproject.toml.

    Gathers dependencies from two locations:
    - [project].dependencies (main runtime deps)
    - [project].optional-dependencies.* (extras installed by users)

    PEP 735 [dependency-groups] are development-only and are not collected:
    a bump of a test helper does not force a release of its users.

    Returns raw PEP 508 strings like "requests>=2.0" or "pkg[extra]~=1.0".
    """
    project = doc.get("project", {})
    deps: list[str] = [str(d) for d in project.get("dependencies", [])]
    for group_deps in project.get("optional-dependencies", {}).values():
        deps.extend(str(d) for d in group_deps)
    return deps


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract workspace member glob patterns from [tool.uv.workspace].

    These patterns (e.g., "packages/*", "libs/*") define which directories
    contain workspace packages.

    Raises:
        ConfigError: If no workspace members are defined.
    """
    members = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("members")
    if not members:
        raise ConfigError(
            "No [tool.uv.workspace] members defined in root pyproject.toml"
        )
    return [str(m) for m in members]


def get_tool_config(doc: tomlkit.TOMLDocument) -> ToolConfig:
    """Read [tool.workspace-version-tools], falling back to defaults.

    Raises:
        ConfigError: If the table holds unknown keys or invalid values.
    """
    table = doc.unwrap().get("tool", {}).get(TOOL_TABLE, {})
    try:
        return ToolConfig.model_validate(table)
    except ValidationError as exc:
        raise ConfigError(f"Invalid [tool.{TOOL_TABLE}] configuration:\n{exc}") from exc
