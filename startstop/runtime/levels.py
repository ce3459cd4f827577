"""Cycle detection and dependency-depth leveling for lifecycle ordering."""

from __future__ import annotations

from collections.abc import Iterable

from startstop.api.errors import CycleError
from startstop.api.graph import Dependence, Node

Path = tuple[Dependence, ...]


def all_paths(source: Node, target: Node, seen: set[Node]) -> list[Path]:
    """Return every dependency path from ``source`` that ends at ``target``.

    ``seen`` collects each node visited other than ``target`` and is never
    re-entered, so it is a reachability limiter rather than a full path
    enumerator. After a call with ``source is target`` it holds the node's
    transitive dependency set.
    """
    if source is not target:
        if source in seen:
            return []
        seen.add(source)

    paths: list[Path] = []
    for dependence in source.dependencies:
        if dependence.node is target:
            paths.append((dependence,))
            continue
        for tail in all_paths(dependence.node, target, seen):
            paths.append((dependence, *tail))
    return paths


def check_path(path: Path) -> None:
    """Raise ``CycleError`` when ``path`` makes start/stop ordering impossible."""
    if len(path) == 1:
        raise CycleError(path)
    # A loop through at most one eligible node is a plain reference cycle.
    eligible = sum(1 for hop in path if hop.node.eligible)
    if eligible > 1:
        raise CycleError(path)


def levels(nodes: Iterable[Node]) -> list[list[Node]]:
    """Group eligible nodes by eligible transitive dependency count.

    The level with the most eligible dependencies comes first, the level
    with none comes last. Ineligible nodes are left out.
    """
    buckets: dict[int, list[Node]] = {}
    for node in nodes:
        if not node.eligible:
            continue
        dependencies: set[Node] = set()
        for path in all_paths(node, node, dependencies):
            check_path(path)
        key = sum(1 for dependency in dependencies if dependency.eligible)
        buckets.setdefault(key, []).append(node)
    return [buckets[key] for key in sorted(buckets, reverse=True)]
