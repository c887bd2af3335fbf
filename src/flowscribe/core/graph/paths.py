# src/flowscribe/core/graph/paths.py
"""Path finding: enumerate simple start-to-end paths inside each route.

Traversal is an explicit-stack depth-first search (no recursion), so deep
canvases cannot exhaust the interpreter stack. The visited set travels with
each stack entry: a node may appear on many paths but never twice on one,
which keeps the search finite on cyclic graphs.
"""

from __future__ import annotations

import re

import structlog

from flowscribe.contracts import HandleName, NodeID, Path, Route, RoutePath, WorkflowEdge
from flowscribe.core.graph.expansion import expand_nested_paths
from flowscribe.core.graph.models import WorkflowGraph
from flowscribe.core.graph.routes import discover_routes

logger = structlog.get_logger(__name__)

_BRANCH_HANDLE = re.compile(r"next-\d+")


def is_branch_handle(handle: str | None) -> bool:
    """Numbered branch output, e.g. "next-0", "next-12"."""
    return handle is not None and _BRANCH_HANDLE.fullmatch(handle) is not None


def is_flow_edge(edge: WorkflowEdge) -> bool:
    """Whether an edge's handle pair carries control flow.

    Accepted pairs (source -> target):
        next -> prev
        next-<N> -> prev
        nested-output -> nested-input
        next -> nested-input
        next-<N> -> nested-input
        nested-output -> prev
        (none) -> (none)
    """
    source, target = edge.source_handle, edge.target_handle
    if source is None and target is None:
        return True
    from_next = source == HandleName.NEXT or is_branch_handle(source)
    from_nested = source == HandleName.NESTED_OUTPUT
    if target == HandleName.PREV:
        return from_next or from_nested
    if target == HandleName.NESTED_INPUT:
        return from_next or from_nested
    return False


def build_route_adjacency(graph: WorkflowGraph, route: Route) -> dict[NodeID, list[NodeID]]:
    """Route-local successor lists, in edge input order.

    Only flow edges count. When a route has in-route edges but none of them
    is a flow edge, every in-route edge is used instead; canvases saved
    before handles were introduced rely on this.
    """
    adjacency: dict[NodeID, list[NodeID]] = {node_id: [] for node_id in route.node_ids}
    in_route = graph.edges_within(route.node_ids)

    for edge in in_route:
        if is_flow_edge(edge):
            adjacency[NodeID(edge.source)].append(NodeID(edge.target))

    if in_route and not any(adjacency.values()):
        logger.warning("permissive_edge_fallback", route=route.path, edges=len(in_route))
        for edge in in_route:
            adjacency[NodeID(edge.source)].append(NodeID(edge.target))

    return adjacency


def find_paths_in_route(graph: WorkflowGraph, route: Route) -> list[Path]:
    """All simple paths from the route's start nodes to its end nodes.

    Emission order is deterministic: start nodes in discovery order, then
    depth-first with the last-pushed neighbor explored first. Callers rely
    on this order for artifact suffixes.
    """
    adjacency = build_route_adjacency(graph, route)
    end_nodes = frozenset(route.end_nodes)
    paths: list[Path] = []

    for start in route.start_nodes:
        stack: list[tuple[NodeID, tuple[NodeID, ...], frozenset[NodeID]]] = [
            (start, (start,), frozenset({start})),
        ]
        while stack:
            node_id, walked, visited = stack.pop()

            if node_id in end_nodes:
                paths.append(Path(end_node_id=node_id, nodes=walked, route=route.path))
                continue

            for neighbor in adjacency.get(node_id, ()):
                if neighbor not in visited:
                    stack.append((neighbor, (*walked, neighbor), visited | {neighbor}))

    logger.debug("route_paths_found", route=route.path, paths=len(paths))
    return paths


def find_route_paths(graph: WorkflowGraph, routes: dict[RoutePath, Route]) -> dict[RoutePath, list[Path]]:
    """Paths per route, keyed in route discovery order."""
    return {path: find_paths_in_route(graph, route) for path, route in routes.items()}


def find_all_paths(graph: WorkflowGraph) -> list[Path]:
    """Discover routes, find their paths, and expand nested scopes.

    Returns root paths with every Nested placeholder replaced by its body.
    When the root has no paths at all, the unexpanded paths of every route
    are returned instead.
    """
    routes = discover_routes(graph)
    route_paths = find_route_paths(graph, routes)
    return expand_nested_paths(graph, route_paths)
