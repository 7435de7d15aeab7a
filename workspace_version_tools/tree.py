"""Propagate bumps through workspace dependents on both release channels.

Starting from the root instructions, every direct workspace dependent is
visited recursively and given the bump its dependency's change requires:

- stable: a MAJOR change in a dependency forces a (derived) MAJOR bump on the
  dependent; anything else forces a PATCH re-pin.
- prerelease: reconciled against stable by ``compute_prerelease_instruction``.

A package reachable through several dependency paths appears once per path in
the tree. ``highest_stable`` and ``highest_prerelease`` keep, per package, the
node with the most severe bump seen on that channel; those maps, not the raw
tree, are what gets applied.
"""

from __future__ import annotations

import logging

from .errors import BumpInvariantError, DependencyCycleError
from .models import BumpInstruction, BumpNode, ReleaseChannel
from .reconcile import compute_prerelease_instruction
from .versions import PRERELEASE_LABEL, BumpMagnitude, Initiator, bump
from .workspace import Workspace

logger = logging.getLogger(__name__)


class BumpTree:
    """Bump tree for a batch of root instructions on one channel.

    Attributes:
        root_nodes: One node per root instruction, in the given order.
        highest_stable: Package name → node carrying its largest stable bump.
        highest_prerelease: Package name → node carrying its largest
            prerelease bump.
    """

    def __init__(
        self,
        stable_workspace: Workspace,
        prerelease_workspace: Workspace,
        root_instructions: list[BumpInstruction],
        channel: ReleaseChannel,
        *,
        prerelease_label: str = PRERELEASE_LABEL,
    ) -> None:
        self.stable_workspace = stable_workspace
        self.prerelease_workspace = prerelease_workspace
        self.channel = channel
        self.prerelease_label = prerelease_label
        self.root_nodes: list[BumpNode] = []
        self.highest_stable: dict[str, BumpNode] = {}
        self.highest_prerelease: dict[str, BumpNode] = {}
        # Packages on the path from the current root to the node being built
        self._path: list[str] = []

        for instruction in root_instructions:
            if channel is ReleaseChannel.PRERELEASE:
                node = self.new_node(None, instruction)
            else:
                name = instruction.package.name
                prerelease = compute_prerelease_instruction(
                    prerelease_workspace.get(name),
                    stable_workspace.get(name),
                    instruction,
                    None,
                    prerelease_label=prerelease_label,
                )
                node = self.new_node(instruction, prerelease)
            self.root_nodes.append(node)

    @property
    def bumped_packages(self) -> set[str]:
        """Names bumped on either channel."""
        return set(self.highest_stable) | set(self.highest_prerelease)

    def new_node(
        self,
        stable: BumpInstruction | None,
        prerelease: BumpInstruction | None,
    ) -> BumpNode:
        """Build the node for one package visit, including all its descendants.

        Children come from the union of the package's direct dependents in
        both workspaces. The finished node is registered in the highest-bump
        maps.

        Raises:
            BumpInvariantError: If neither instruction is given.
            DependencyCycleError: If the package is already on the current
                path.
        """
        if stable is None and prerelease is None:
            raise BumpInvariantError(
                "Bump node requires a stable or a prerelease instruction"
            )
        name = stable.package.name if stable is not None else prerelease.package.name
        if name in self._path:
            cycle = self._path[self._path.index(name) :] + [name]
            across = not any(
                _has_cycle(ws, cycle)
                for ws in (self.stable_workspace, self.prerelease_workspace)
            )
            raise DependencyCycleError(cycle, across_channels=across)

        dependent_names: set[str] = set()
        if stable is not None:
            dependent_names.update(self.stable_workspace.dependents(name))
        if prerelease is not None:
            dependent_names.update(self.prerelease_workspace.dependents(name))

        children: list[BumpNode] = []
        self._path.append(name)
        try:
            for dependent in sorted(dependent_names):
                child = self.derive_child_node(stable, prerelease, dependent)
                if child is not None:
                    children.append(child)
        finally:
            self._path.pop()

        node = BumpNode(stable=stable, prerelease=prerelease, children=children)
        if stable is not None:
            _register(self.highest_stable, name, node, "stable")
        if prerelease is not None:
            _register(self.highest_prerelease, name, node, "prerelease")
        return node

    def derive_child_node(
        self,
        stable_parent: BumpInstruction | None,
        prerelease_parent: BumpInstruction | None,
        name: str,
    ) -> BumpNode | None:
        """Derive the bumps a dependent needs from its parent's bumps.

        Returns None when the dependent needs no bump on either channel, in
        which case propagation stops there.
        """
        stable_package = self.stable_workspace.get(name)
        prerelease_package = self.prerelease_workspace.get(name)

        stable: BumpInstruction | None = None
        if stable_parent is not None and stable_package is not None:
            if stable_parent.magnitude is BumpMagnitude.MAJOR:
                magnitude = BumpMagnitude.MAJOR
            else:
                magnitude = BumpMagnitude.PATCH
            stable = BumpInstruction(
                package=stable_package,
                next_version=bump(
                    stable_package.semantic_version, magnitude, Initiator.DERIVED
                ),
            )

        prerelease = compute_prerelease_instruction(
            prerelease_package,
            stable_package,
            stable,
            prerelease_parent,
            prerelease_label=self.prerelease_label,
        )

        if stable is None and prerelease is None:
            logger.debug("%s needs no bump on either channel", name)
            return None
        return self.new_node(stable, prerelease)


def _register(
    highest: dict[str, BumpNode], name: str, node: BumpNode, side: str
) -> None:
    """Record node for name if its bump on side is strictly larger.

    Ties keep the node recorded first.
    """
    recorded = highest.get(name)
    if recorded is None:
        highest[name] = node
        return
    current = getattr(recorded, side)
    candidate = getattr(node, side)
    if current is None or candidate is None:
        raise BumpInvariantError(f"{name}: {side} bump missing from a recorded node")
    if candidate.magnitude > current.magnitude:
        highest[name] = node


def _has_cycle(workspace: Workspace, cycle: list[str]) -> bool:
    """Whether every dependent edge of cycle exists in workspace alone."""
    return all(
        dependent in workspace.dependents(name)
        for name, dependent in zip(cycle, cycle[1:])
    )
