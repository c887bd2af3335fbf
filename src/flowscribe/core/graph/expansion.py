# src/flowscribe/core/graph/expansion.py
"""Nested-scope expansion.

A Nested node in a path is replaced by each internal path of its child
route, minus that route's own Start/End markers. Several Nested nodes on
one path multiply: the candidate list starts as [base] and is rebuilt once
per Nested node, so the result is the Cartesian product of alternatives in
path order.

Child routes are expanded before they are spliced, so bodies nested two or
more levels deep end up inline as well.
"""

from __future__ import annotations

import structlog

from flowscribe.contracts import ROOT_ROUTE, NodeID, NodeKind, Path, RoutePath
from flowscribe.core.graph.models import WorkflowGraph

logger = structlog.get_logger(__name__)

_SCOPE_MARKERS = frozenset({NodeKind.START, NodeKind.END})


def child_route_of(route: RoutePath, nested_node_id: NodeID) -> RoutePath:
    """Route that holds the body of ``nested_node_id`` placed on ``route``."""
    prefix = "" if route == ROOT_ROUTE else route
    return RoutePath(f"{prefix}/{nested_node_id}")


class NestedPathExpander:
    """Expands paths against a fixed set of per-route paths.

    Internal paths are expanded at most once per route and cached.
    """

    def __init__(self, graph: WorkflowGraph, route_paths: dict[RoutePath, list[Path]]) -> None:
        self._graph = graph
        self._route_paths = route_paths
        self._expanded_bodies: dict[RoutePath, list[tuple[NodeID, ...]]] = {}

    def expand(self, path: Path) -> list[Path]:
        nested_ids = [n for n in path.nodes if self._graph.kind_of(n) == NodeKind.NESTED]
        if not nested_ids:
            return [path]

        candidates: list[tuple[NodeID, ...]] = [path.nodes]
        for nested_id in nested_ids:
            bodies = self._bodies_for(child_route_of(path.route, nested_id))
            if not bodies:
                # Left in place; it emits no code
                logger.warning("nested_scope_without_paths", nested_node_id=nested_id, route=path.route)
                continue

            rebuilt: list[tuple[NodeID, ...]] = []
            for current in candidates:
                if nested_id not in current:
                    continue
                index = current.index(nested_id)
                for body in bodies:
                    rebuilt.append((*current[:index], *body, *current[index + 1 :]))
            candidates = rebuilt

        return [Path(end_node_id=path.end_node_id, nodes=nodes, route=path.route) for nodes in candidates]

    def _bodies_for(self, route: RoutePath) -> list[tuple[NodeID, ...]]:
        if route not in self._expanded_bodies:
            bodies: list[tuple[NodeID, ...]] = []
            for internal in self._route_paths.get(route, []):
                for expanded in self.expand(internal):
                    bodies.append(tuple(n for n in expanded.nodes if self._graph.kind_of(n) not in _SCOPE_MARKERS))
            self._expanded_bodies[route] = bodies
        return self._expanded_bodies[route]


def expand_nested_paths(graph: WorkflowGraph, route_paths: dict[RoutePath, list[Path]]) -> list[Path]:
    """Expand every root path; fall back to all route paths when the root has none."""
    root_paths = route_paths.get(ROOT_ROUTE, [])
    if not root_paths:
        logger.debug("no_root_paths_returning_route_paths", routes=len(route_paths))
        return [p for paths in route_paths.values() for p in paths]

    expander = NestedPathExpander(graph, route_paths)
    expanded: list[Path] = []
    for root_path in root_paths:
        expanded.extend(expander.expand(root_path))
    return expanded
