# src/flowscribe/core/graph/routes.py
"""Route discovery: partition nodes into scopes and find their entry/exit nodes."""

from __future__ import annotations

import structlog

from flowscribe.contracts import ROOT_ROUTE, NodeID, NodeKind, Route, RoutePath
from flowscribe.core.graph.models import WorkflowGraph

logger = structlog.get_logger(__name__)


def split_route(route: str) -> tuple[RoutePath | None, NodeID | None]:
    """Return (parent_path, nested_node_id) for a route string.

    The last segment names the Nested node that the route expands; the
    remaining segments (or "/" when there is only one) form the parent.

    >>> split_route("/")
    (None, None)
    >>> split_route("/a")
    ('/', 'a')
    >>> split_route("/a/b")
    ('/a', 'b')
    """
    if route == ROOT_ROUTE:
        return None, None
    parts = [p for p in route.split("/") if p]
    if not parts:
        return None, None
    parent = "/" + "/".join(parts[:-1]) if len(parts) > 1 else ROOT_ROUTE
    return RoutePath(parent), NodeID(parts[-1])


def discover_routes(graph: WorkflowGraph) -> dict[RoutePath, Route]:
    """Group nodes by route, in order of first appearance.

    A route with no start or no end node is kept; it just yields no paths.
    """
    members: dict[RoutePath, list[NodeID]] = {}
    for classified in graph:
        members.setdefault(RoutePath(classified.node.route), []).append(NodeID(classified.node_id))

    routes: dict[RoutePath, Route] = {}
    for path, node_ids in members.items():
        starts = tuple(n for n in node_ids if graph.kind_of(n) == NodeKind.START)
        ends = tuple(n for n in node_ids if graph.kind_of(n) == NodeKind.END)
        parent_path, nested_node_id = split_route(path)
        if not starts or not ends:
            logger.warning(
                "route_without_start_or_end",
                route=path,
                start_nodes=len(starts),
                end_nodes=len(ends),
            )
        routes[path] = Route(
            path=path,
            parent_path=parent_path,
            nested_node_id=nested_node_id,
            start_nodes=starts,
            end_nodes=ends,
            node_ids=tuple(node_ids),
        )
    return routes
