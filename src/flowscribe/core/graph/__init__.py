# src/flowscribe/core/graph/__init__.py
"""Workflow graph operations: routes, paths, nested expansion."""

from flowscribe.core.graph.expansion import NestedPathExpander, child_route_of, expand_nested_paths
from flowscribe.core.graph.models import WorkflowGraph
from flowscribe.core.graph.paths import (
    build_route_adjacency,
    find_all_paths,
    find_paths_in_route,
    find_route_paths,
    is_branch_handle,
    is_flow_edge,
)
from flowscribe.core.graph.routes import discover_routes, split_route

__all__ = [
    "NestedPathExpander",
    "WorkflowGraph",
    "build_route_adjacency",
    "child_route_of",
    "discover_routes",
    "expand_nested_paths",
    "find_all_paths",
    "find_paths_in_route",
    "find_route_paths",
    "is_branch_handle",
    "is_flow_edge",
    "split_route",
]
