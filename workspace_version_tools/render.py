"""Human readable rendering of a bump tree.

Only children that are the recorded highest bump for their package are
drawn, so every package appears once per meaningful path and superseded
smaller bumps are hidden.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import click

from .models import BumpInstruction, BumpNode
from .versions import BumpMagnitude

BANNER = "🌲" * 32
TITLE = "🌲 Bump Tree (duplicates emitted, breaking bumps prioritised) 🌲"


def render_tree(
    root_nodes: Sequence[BumpNode],
    highest_stable: Mapping[str, BumpNode],
    highest_prerelease: Mapping[str, BumpNode],
    *,
    color: bool = True,
) -> str:
    """Render root nodes and their significant descendants as a text tree.

    Example (without color):

        a stable(1.0.0 -> 2.0.0) prerelease(1.0.0 -> 3.0.0-alpha)
        ├── b stable(0.1.0 -> 0.2.0)
        └── c stable(2.3.1 -> 3.0.0)
    """
    lines = [BANNER, TITLE, BANNER]
    for node in root_nodes:
        _render_node(
            node, highest_stable, highest_prerelease, lines, "", True, True, color
        )
        lines.append("")
    total = len(set(highest_stable) | set(highest_prerelease))
    lines.append(f"Packages updated: {total}")
    return "\n".join(lines)


def describe_instruction(
    side: str, instruction: BumpInstruction | None, *, color: bool = True
) -> str:
    """Format one channel's bump as ' side(current -> next)'."""
    if instruction is None:
        return ""
    change = f"{instruction.current_version} -> {instruction.next_version}"
    if color:
        fg = "red" if instruction.magnitude is BumpMagnitude.MAJOR else "blue"
        change = click.style(change, fg=fg)
    return f" {side}({change})"


def _render_node(
    node: BumpNode,
    highest_stable: Mapping[str, BumpNode],
    highest_prerelease: Mapping[str, BumpNode],
    lines: list[str],
    prefix: str,
    last: bool,
    root: bool,
    color: bool,
) -> None:
    if root:
        connector = ""
    elif last:
        connector = "└── "
    else:
        connector = "├── "

    lines.append(
        f"{prefix}{connector}{node.package_name}"
        + describe_instruction("stable", node.stable, color=color)
        + describe_instruction("prerelease", node.prerelease, color=color)
    )

    if root:
        child_prefix = prefix
    else:
        child_prefix = prefix + ("    " if last else "│   ")

    significant = [
        child
        for child in node.children
        if highest_stable.get(child.package_name) is child
        or highest_prerelease.get(child.package_name) is child
    ]
    for i, child in enumerate(significant):
        _render_node(
            child,
            highest_stable,
            highest_prerelease,
            lines,
            child_prefix,
            i == len(significant) - 1,
            False,
            color,
        )
