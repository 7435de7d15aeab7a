"""Exceptions raised while resolving and propagating version bumps."""

from __future__ import annotations


class BumpError(Exception):
    """A bump request that cannot be honoured as written."""


class InstructionParseError(BumpError):
    """Instruction text is not of the form '<package> <major|minor|patch>'."""

    def __init__(self, text: str, reason: str) -> None:
        super().__init__(f"Invalid bump instruction '{text}': {reason}")
        self.text = text


class UnknownPackageError(BumpError):
    """A directly requested package is missing from the channel's workspace."""

    def __init__(self, name: str, workspace: str) -> None:
        super().__init__(f"Package {name} not found in {workspace} workspace")
        self.name = name
        self.workspace = workspace


class ConfigError(BumpError):
    """The [tool.workspace-version-tools] table is invalid."""


class BumpInvariantError(RuntimeError):
    """Internal invariant violated while building the bump tree."""


class DependencyCycleError(RuntimeError):
    """The workspace dependency graph contains a cycle."""

    def __init__(self, cycle: list[str], across_channels: bool = False) -> None:
        message = f"Dependency cycle detected: {' → '.join(cycle)}"
        if across_channels:
            message += (
                " (no single workspace has this cycle: some edges come from the"
                " stable workspace and some from the prerelease workspace)"
            )
        super().__init__(message)
        self.cycle = cycle
        self.across_channels = across_channels
