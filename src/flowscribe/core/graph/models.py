# src/flowscribe/core/graph/models.py
"""WorkflowGraph: classified nodes plus ordered edges.

Wraps a NetworkX MultiDiGraph. MultiDiGraph keeps duplicate edges between
the same node pair, and every edge carries its position in the caller's
edge list so traversal order follows input order exactly.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator, Sequence
from operator import itemgetter

import networkx as nx
import structlog
from networkx import MultiDiGraph

from flowscribe.contracts import NodeKind, RoutePath, WorkflowEdge, WorkflowNode
from flowscribe.core.classification import ClassifiedNode, NodeClassifier

logger = structlog.get_logger(__name__)


class WorkflowGraph:
    """Read-only view over one call's nodes and edges.

    Nodes are classified once here. Duplicate node ids resolve to the last
    occurrence. Edges whose endpoints are not both known nodes are dropped:
    they can never lie inside a route.
    """

    def __init__(
        self,
        nodes: Sequence[WorkflowNode],
        edges: Sequence[WorkflowEdge],
        classifier: NodeClassifier | None = None,
    ) -> None:
        classifier = classifier or NodeClassifier()
        self._graph: MultiDiGraph[str] = nx.MultiDiGraph()
        self._nodes: dict[str, ClassifiedNode] = {}

        for node in nodes:
            classified = classifier.classify(node)
            self._nodes[node.id] = classified
            self._graph.add_node(node.id, info=classified)

        dropped = 0
        for order, edge in enumerate(edges):
            if edge.source not in self._nodes or edge.target not in self._nodes:
                dropped += 1
                continue
            self._graph.add_edge(edge.source, edge.target, key=order, order=order, edge=edge)
        if dropped:
            logger.debug("edges_with_unknown_endpoints_dropped", count=dropped)

    @property
    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get(self, node_id: str) -> ClassifiedNode | None:
        return self._nodes.get(node_id)

    def kind_of(self, node_id: str) -> NodeKind | None:
        classified = self._nodes.get(node_id)
        return classified.kind if classified is not None else None

    def __iter__(self) -> Iterator[ClassifiedNode]:
        return iter(self._nodes.values())

    def route_of(self, node_id: str) -> RoutePath:
        return RoutePath(self._nodes[node_id].node.route)

    def edges_within(self, node_ids: Collection[str]) -> list[WorkflowEdge]:
        """Edges whose endpoints both lie in ``node_ids``, in input order."""
        sub = self._graph.subgraph(node_ids)
        ordered = sorted(sub.edges(data=True), key=lambda e: e[2]["order"])
        return [data["edge"] for _, _, data in ordered]

    def out_edges(self, node_id: str) -> list[WorkflowEdge]:
        """Outgoing edges of a node, in input order."""
        ordered = sorted(self._graph.out_edges(node_id, data="order"), key=itemgetter(2))
        return [self._graph.edges[u, v, order]["edge"] for u, v, order in ordered]

    def get_nx_graph(self) -> MultiDiGraph[str]:
        """Return a frozen copy of the underlying NetworkX graph."""
        return nx.freeze(self._graph.copy())  # type: ignore[no-any-return]
