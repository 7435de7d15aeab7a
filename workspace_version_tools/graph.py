"""Dependency graph utilities.

Operates on the name → PackageInfo map of one channel's workspace. Edges
point from a package to the workspace packages it depends on; dependents are
the reverse edges.
"""

from __future__ import annotations

from collections.abc import Mapping

from .errors import DependencyCycleError
from .models import PackageInfo


def reverse_deps(packages: Mapping[str, PackageInfo]) -> dict[str, list[str]]:
    """Map each package to the sorted names of its direct dependents.

    Dependencies outside ``packages`` are ignored.
    """
    dependents: dict[str, list[str]] = {n: [] for n in packages}
    for name, info in packages.items():
        for dep in info.deps:
            if dep in dependents:
                dependents[dep].append(name)
    return {n: sorted(set(d)) for n, d in dependents.items()}


def topo_sort(packages: Mapping[str, PackageInfo]) -> list[str]:
    """Topologically sort packages by their internal dependencies.

    Uses Kahn's algorithm to produce an order where dependencies come
    before dependents. Ties are broken alphabetically for deterministic
    output.

    Raises:
        DependencyCycleError: If a dependency cycle is detected.

    Example:
        If A depends on B, and B depends on C:
        topo_sort({A, B, C}) → [C, B, A]
    """
    dependents = reverse_deps(packages)
    # Count distinct in-workspace dependencies; deps outside the map are ignored
    in_degree = {
        name: len({d for d in info.deps if d in packages})
        for name, info in packages.items()
    }

    queue = sorted(n for n, d in in_degree.items() if d == 0)
    order: list[str] = []

    while queue:
        node = queue.pop(0)
        order.append(node)
        for dependent in dependents[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(order) != len(packages):
        remaining = sorted(set(packages) - set(order))
        raise DependencyCycleError(find_cycle(packages) or remaining)

    return order


def find_cycle(packages: Mapping[str, PackageInfo]) -> list[str] | None:
    """Return one dependency cycle as a closed path (first == last), or None."""
    visiting: list[str] = []
    done: set[str] = set()

    def visit(name: str) -> list[str] | None:
        if name in visiting:
            return visiting[visiting.index(name) :] + [name]
        if name in done:
            return None
        visiting.append(name)
        for dep in sorted(packages[name].deps):
            if dep in packages and (cycle := visit(dep)) is not None:
                return cycle
        visiting.pop()
        done.add(name)
        return None

    for name in sorted(packages):
        if (cycle := visit(name)) is not None:
            return cycle
    return None


def find_dependents(package: str, packages: Mapping[str, PackageInfo]) -> set[str]:
    """Find all dependents (both direct and indirect) of a package."""
    dependents = reverse_deps(packages)
    found: set[str] = set()
    stack = [package]
    while stack:
        current = stack.pop()
        for dependent in dependents.get(current, []):
            if dependent not in found:
                found.add(dependent)
                stack.append(dependent)
    return found


def find_dependencies(package: str, packages: Mapping[str, PackageInfo]) -> set[str]:
    """Find all workspace dependencies (both direct and indirect) of a package."""
    found: set[str] = set()
    stack = [package]
    while stack:
        current = stack.pop()
        info = packages.get(current)
        if info is None:
            continue
        for dep in info.deps:
            if dep in packages and dep not in found:
                found.add(dep)
                stack.append(dep)
    return found
