"""Data models for workspace-version-tools.

The Pydantic models here are the records the bump algorithm passes around:
workspace packages, the instructions computed for them, and the nodes of the
bump tree. Instructions and nodes reference packages; they never copy or
mutate them.
"""

from __future__ import annotations

from enum import Enum

import semver
from pydantic import BaseModel, ConfigDict, Field

from .errors import BumpInvariantError
from .versions import BumpMagnitude, magnitude_between, parse_version


class ReleaseChannel(str, Enum):
    """One of the two parallel release lines."""

    STABLE = "stable"
    PRERELEASE = "prerelease"


class PackageInfo(BaseModel):
    """Metadata for a single package in one channel's workspace.

    Attributes:
        name: Canonical (PEP 503) package name, unique within the workspace.
        path: Package directory, relative to the workspace root.
        version: Current version string from pyproject.toml.
        deps: Direct, non-development workspace dependency names. External
              deps are not tracked since only internal edges propagate bumps.
        channel: Release channel of the workspace this package belongs to.
    """

    name: str
    path: str = ""
    version: str
    deps: list[str] = Field(default_factory=list)
    channel: ReleaseChannel = ReleaseChannel.STABLE

    @property
    def semantic_version(self) -> semver.Version:
        return parse_version(self.version)


class BumpInstruction(BaseModel):
    """Bump ``package`` to ``next_version``.

    The magnitude is not stored: it is derived by comparing next_version to
    the package's current version.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    package: PackageInfo
    next_version: semver.Version

    @property
    def current_version(self) -> semver.Version:
        return self.package.semantic_version

    @property
    def magnitude(self) -> BumpMagnitude:
        return magnitude_between(self.current_version, self.next_version)

    def __str__(self) -> str:
        return f"{self.package.name} {self.current_version} → {self.next_version}"


class BumpNode(BaseModel):
    """One visit of a package while walking dependents.

    The same package may appear in several nodes, once per dependency path
    that reaches it. At least one of stable/prerelease is always set.
    """

    stable: BumpInstruction | None = None
    prerelease: BumpInstruction | None = None
    children: list[BumpNode] = Field(default_factory=list)

    @property
    def package_name(self) -> str:
        if self.stable is not None:
            return self.stable.package.name
        if self.prerelease is not None:
            return self.prerelease.package.name
        raise BumpInvariantError(
            "Bump node has neither a stable nor a prerelease instruction"
        )

    def __eq__(self, other: object) -> bool:
        # Children are deliberately ignored: equal bumps reached by
        # different paths are the same node.
        if not isinstance(other, BumpNode):
            return NotImplemented
        return self.stable == other.stable and self.prerelease == other.prerelease


class VersionBump(BaseModel):
    """Records a version change applied to a package.

    Used to report what was written during the apply phase and to build
    commit messages.

    Attributes:
        old: The version before bumping.
        new: The version after bumping.
    """

    old: str
    new: str


class ToolConfig(BaseModel):
    """Settings from [tool.workspace-version-tools] in the root pyproject.toml."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    prerelease_label: str = Field(default="alpha", alias="prerelease-label")
    lock_command: list[str] = Field(
        default_factory=lambda: ["uv", "lock"], alias="lock-command"
    )
    propagate_branch: str = Field(
        default="propagate-{package}-stable-bump-to-{version}",
        alias="propagate-branch",
    )
