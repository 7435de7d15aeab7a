"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import tomlkit

from workspace_version_tools.models import PackageInfo, ReleaseChannel
from workspace_version_tools.workspace import Workspace

# name → (version, internal deps)
PackageSpec = dict[str, tuple[str, list[str]]]
WorkspaceFactory = Callable[..., Workspace]


@pytest.fixture
def make_workspace() -> WorkspaceFactory:
    """Build an in-memory workspace from {name: (version, deps)}."""

    def factory(
        entries: PackageSpec, channel: ReleaseChannel = ReleaseChannel.STABLE
    ) -> Workspace:
        packages = {
            name: PackageInfo(name=name, path=name, version=version, deps=list(deps))
            for name, (version, deps) in entries.items()
        }
        return Workspace(packages, channel=channel)

    return factory


def write_uv_workspace(
    root: Path, packages: PackageSpec, tool_config: str = ""
) -> Path:
    """Write a uv workspace checkout with one package per entry."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "pyproject.toml").write_text(
        '[tool.uv.workspace]\nmembers = ["packages/*"]\n' + tool_config
    )
    for name, (version, deps) in packages.items():
        package_dir = root / "packages" / name
        package_dir.mkdir(parents=True)
        dep_lines = "".join(f'    "{d}>=0.1",\n' for d in deps)
        (package_dir / "pyproject.toml").write_text(
            f'[project]\nname = "{name}"\nversion = "{version}"\n'
            f"dependencies = [\n    \"requests>=2.0\",\n{dep_lines}]\n"
        )
    return root


@pytest.fixture
def uv_workspace_writer() -> Callable[..., Path]:
    return write_uv_workspace


@pytest.fixture
def uv_workspaces(tmp_path: Path) -> tuple[Path, Path]:
    """Stable and prerelease checkouts of the same three-package workspace.

    core ← api ← cli, with the prerelease line one patch ahead.
    """
    stable = write_uv_workspace(
        tmp_path / "stable",
        {
            "core": ("1.0.0", []),
            "api": ("1.2.0", ["core"]),
            "cli": ("0.3.0", ["api"]),
        },
    )
    prerelease = write_uv_workspace(
        tmp_path / "prerelease",
        {
            "core": ("1.0.1-alpha", []),
            "api": ("1.2.1-alpha", ["core"]),
            "cli": ("0.3.1-alpha", ["api"]),
        },
    )
    return stable, prerelease


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    content = """\
[project]
name = "test-package"
version = "1.0.0"
dependencies = [
    "requests>=2.0",
    "internal-dep>=1.0",
]

[project.optional-dependencies]
cli = ["click>=8.0", "another-internal>=0.5"]

[dependency-groups]
test = ["pytest>=8.0", "group-internal>=0.1"]
"""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(content)
    return pyproject


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document."""
    content = """\
[project]
name = "my-package"
version = "2.0.0"
dependencies = ["click>=8.0", "pydantic>=2.0"]

[project.optional-dependencies]
yaml = ["pyyaml>=6.0"]
docs = ["sphinx>=7.0"]

[dependency-groups]
test = ["hypothesis>=6.0"]

[tool.uv.workspace]
members = ["packages/*", "libs/*"]
"""
    return tomlkit.parse(content)
