# src/flowscribe/transpiler/errors.py
"""Error aggregation for a finished generation call."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from flowscribe.contracts import AssembledArtifact, NodeID, PluginResult
from flowscribe.core.graph import WorkflowGraph


class ErrorCollector:
    """Builds the per-node and per-artifact error maps.

    Sequence-child errors are keyed by the child's node id. A node result
    error for the same id takes precedence.
    """

    def __init__(self, graph: WorkflowGraph) -> None:
        self._graph = graph

    def by_node_id(
        self,
        results: Mapping[NodeID, PluginResult],
        child_errors: Mapping[str, str],
    ) -> dict[str, str]:
        errors: dict[str, str] = dict(child_errors)
        for node_id, result in results.items():
            if result.error is not None:
                errors[node_id] = result.error
        return errors

    def by_artifact_id(
        self,
        artifacts: Iterable[AssembledArtifact],
        errors_by_node_id: Mapping[str, str],
    ) -> dict[str, dict[str, str]]:
        """Errors per artifact; artifacts without errors are left out."""
        if not errors_by_node_id:
            return {}

        by_artifact: dict[str, dict[str, str]] = {}
        for artifact in artifacts:
            found: dict[str, str] = {}
            for node_id in artifact.path.nodes:
                if node_id in errors_by_node_id:
                    found[node_id] = errors_by_node_id[node_id]
            for child_id in self._sequence_child_ids(artifact.path.nodes):
                if child_id in errors_by_node_id:
                    found[child_id] = errors_by_node_id[child_id]
            if found:
                by_artifact[artifact.artifact_id] = found
        return by_artifact

    def _sequence_child_ids(self, node_ids: Iterable[NodeID]) -> list[str]:
        child_ids: list[str] = []
        for node_id in node_ids:
            classified = self._graph.get(node_id)
            if classified is None or classified.node.data.sequence_items is None:
                continue
            child_ids.extend(item.node_id for item in classified.node.data.sequence_items if item.node_id)
        return child_ids
