"""In-memory view of one channel's uv workspace.

A Workspace is loaded once per channel before any bump is computed. The bump
algorithm only reads from it; versions are written back through
``Workspace.set_version`` by the apply phase, after the bump tree is built.
"""

from __future__ import annotations

import glob
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path

import semver

from .deps import dep_canonical_name, rewrite_pyproject
from .errors import BumpInvariantError, ConfigError
from .graph import find_dependencies, find_dependents, reverse_deps, topo_sort
from .models import PackageInfo, ReleaseChannel, ToolConfig
from .toml import (
    get_project_name,
    get_project_version,
    get_runtime_dependency_strings,
    get_tool_config,
    get_workspace_member_globs,
    load_pyproject,
)

logger = logging.getLogger(__name__)


class Workspace:
    """Name-keyed packages of one checkout plus their dependent edges.

    Args:
        packages: Map of canonical package name → PackageInfo.
        channel: Release channel this checkout represents.
        root: Checkout root. In-memory workspaces (root=None) never touch disk.
        config: Tool settings read from the root pyproject.toml.
    """

    def __init__(
        self,
        packages: Mapping[str, PackageInfo],
        channel: ReleaseChannel = ReleaseChannel.STABLE,
        root: Path | None = None,
        config: ToolConfig | None = None,
    ) -> None:
        self.packages = dict(packages)
        self.channel = channel
        self.root = root
        self.config = config or ToolConfig()
        for info in self.packages.values():
            info.channel = channel
        self._dependents = reverse_deps(self.packages)

    def __repr__(self) -> str:
        return f"Workspace({self.label!r}, {len(self.packages)} packages)"

    def __contains__(self, name: str) -> bool:
        return name in self.packages

    def __iter__(self) -> Iterator[PackageInfo]:
        return iter(self.packages.values())

    @property
    def label(self) -> str:
        """Human readable name used in errors, e.g. "stable (/repo)"."""
        if self.root is None:
            return self.channel.value
        return f"{self.channel.value} ({self.root})"

    def get(self, name: str) -> PackageInfo | None:
        return self.packages.get(name)

    def dependents(self, name: str) -> list[str]:
        """Sorted names of packages with a direct runtime dependency on name."""
        return list(self._dependents.get(name, []))

    def dependencies(self, name: str) -> list[str]:
        info = self.packages.get(name)
        return [d for d in info.deps if d in self.packages] if info else []

    def all_dependents(self, name: str) -> set[str]:
        return find_dependents(name, self.packages)

    def all_dependencies(self, name: str) -> set[str]:
        return find_dependencies(name, self.packages)

    def build_order(self) -> list[str]:
        """Dependencies-first order of every package.

        Raises:
            DependencyCycleError: If the workspace graph has a cycle.
        """
        return topo_sort(self.packages)

    def set_version(self, name: str, version: semver.Version | str) -> None:
        """Record a new version for name and write it to its pyproject.toml."""
        info = self.packages[name]
        new_version = str(version)
        logger.debug("Bumping %s (%s) to %s", name, self.channel.value, new_version)
        if self.root is not None:
            rewrite_pyproject(self._pyproject(info), new_version, {})
        info.version = new_version

    def repin_dependents(self, bumped: Mapping[str, str]) -> list[str]:
        """Re-pin internal dependency specifiers on freshly bumped packages.

        Args:
            bumped: Map of package name → new version, for this workspace.

        Returns:
            Names of the packages whose pyproject.toml was rewritten.
        """
        touched: list[str] = []
        for name, info in self.packages.items():
            pins = {dep: bumped[dep] for dep in info.deps if dep in bumped}
            if not pins:
                continue
            if self.root is not None:
                rewrite_pyproject(self._pyproject(info), None, pins)
            touched.append(name)
        return touched

    def _pyproject(self, info: PackageInfo) -> Path:
        if self.root is None:
            raise BumpInvariantError(f"{self.label} workspace has no checkout on disk")
        return self.root / info.path / "pyproject.toml"


def discover_workspace(
    root: Path, channel: ReleaseChannel = ReleaseChannel.STABLE
) -> Workspace:
    """Scan a uv workspace checkout and load all its packages.

    Reads [tool.uv.workspace].members from the root pyproject.toml to find
    package directories, then extracts name, version, and internal runtime
    deps from each package's pyproject.toml.

    Raises:
        ConfigError: If no packages are found, or two members share a name.
    """
    root = root.resolve()
    root_doc = load_pyproject(root / "pyproject.toml")
    member_globs = get_workspace_member_globs(root_doc)
    config = get_tool_config(root_doc)

    # Expand globs to find all package directories
    member_dirs: list[Path] = []
    for pattern in member_globs:
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match)
            if (p / "pyproject.toml").exists():
                member_dirs.append(p)

    if not member_dirs:
        raise ConfigError(f"No packages found matching workspace members in {root}")

    # First pass: collect basic info from each package
    packages: dict[str, PackageInfo] = {}
    raw_deps: dict[str, list[str]] = {}

    for d in member_dirs:
        doc = load_pyproject(d / "pyproject.toml")
        name = get_project_name(doc, d.name)
        if name in packages:
            raise ConfigError(
                f"Package {name} is defined twice: {packages[name].path} and "
                f"{d.relative_to(root)}"
            )
        packages[name] = PackageInfo(
            name=name,
            path=str(d.relative_to(root)),
            version=get_project_version(doc),
            channel=channel,
        )
        raw_deps[name] = get_runtime_dependency_strings(doc)

    # Second pass: keep only deps that are workspace members
    for name, deps in raw_deps.items():
        for dep_str in deps:
            dep_name = dep_canonical_name(dep_str)
            if dep_name in packages and dep_name not in packages[name].deps:
                packages[name].deps.append(dep_name)

    for info in packages.values():
        deps = f" → [{', '.join(info.deps)}]" if info.deps else ""
        logger.debug("Loaded %s %s (%s)%s", info.name, info.version, info.path, deps)

    return Workspace(packages, channel=channel, root=root, config=config)
