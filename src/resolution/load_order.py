"""Deterministic load-order resolution over the dependency graph.

The order is a topological sort of the precedence graph (edge B -> A when A
declares a required, optional or hidden-optional dependency on enabled B).
Among packages whose predecessors are all placed, the one with the smallest
natural name goes next. No pairwise comparator is involved, so the result
is a well-defined function of the edge set.
"""

from __future__ import annotations

import heapq
import logging
from typing import Dict, Iterable, List, Optional, Set

from common.errors import CyclicDependency
from common.logging_utils import Timer, extra_context, is_debug_enabled
from versioning.models import Package, ResolvedLoadOrder
from .naming import natural_key

logger = logging.getLogger(__name__)


def build_graph(packages: Dict[str, Package]) -> Dict[str, Set[str]]:
    """Return ``{name: predecessors}`` for the enabled packages given.

    Relations on packages outside *packages* add no edge, nor do
    self-references.
    """
    predecessors: Dict[str, Set[str]] = {name: set() for name in packages}
    for name, package in packages.items():
        for relation in package.relations:
            if not relation.kind.affects_order:
                continue
            if relation.target in packages and relation.target != name:
                predecessors[name].add(relation.target)
    return predecessors


def find_cycle(predecessors: Dict[str, Set[str]], remaining: Iterable[str]) -> List[str]:
    """Return the members of one cycle among *remaining* nodes, in edge order.

    Every remaining node has at least one remaining predecessor, so walking
    predecessors from any start must revisit a node.
    """
    pending = set(remaining)
    start = min(pending, key=natural_key)
    path: List[str] = []
    seen: Dict[str, int] = {}
    node: Optional[str] = start
    while node is not None and node not in seen:
        seen[node] = len(path)
        path.append(node)
        candidates = [p for p in predecessors[node] if p in pending]
        node = min(candidates, key=natural_key) if candidates else None
    if node is None:
        return path
    cycle = path[seen[node]:]
    # predecessor walk runs against the edges; report it dependency-first
    cycle.reverse()
    return cycle


def resolve_order(packages: Iterable[Package], settings_path: Optional[str] = None) -> ResolvedLoadOrder:
    """Compute the load order of the enabled packages.

    Disabled packages are ignored.

    Raises:
        CyclicDependency: when the precedence graph has a cycle.
    """
    enabled = {p.name: p for p in packages if p.enabled}
    predecessors = build_graph(enabled)

    successors: Dict[str, List[str]] = {name: [] for name in enabled}
    for name, preds in predecessors.items():
        for pred in preds:
            successors[pred].append(name)
    in_degree = {name: len(preds) for name, preds in predecessors.items()}

    with Timer() as t:
        heap = [(natural_key(name), name) for name, degree in in_degree.items() if degree == 0]
        heapq.heapify(heap)
        ordered: List[str] = []
        while heap:
            _, name = heapq.heappop(heap)
            ordered.append(name)
            for succ in successors[name]:
                in_degree[succ] -= 1
                if in_degree[succ] == 0:
                    heapq.heappush(heap, (natural_key(succ), succ))

    if len(ordered) != len(enabled):
        placed = set(ordered)
        members = find_cycle(predecessors, (n for n in enabled if n not in placed))
        raise CyclicDependency(members)

    if is_debug_enabled(logger):
        logger.debug(
            "Load order resolved",
            extra=extra_context(
                event="function_exit",
                component="load_order",
                action="resolve_order",
                count=len(ordered),
                duration_ms=t.duration_ms(),
            ),
        )
    return ResolvedLoadOrder(packages=tuple(enabled[n] for n in ordered), settings_path=settings_path)
