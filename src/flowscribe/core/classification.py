# src/flowscribe/core/classification.py
"""Single-pass node classification.

Raw type tags are mapped to a NodeKind once, when a WorkflowGraph is built.
The tag vocabulary is configuration (NodeTypeVocabulary); this module only
knows the six structural roles and the reserved-namespace convention.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from flowscribe.contracts import STRUCTURAL_KINDS, NodeKind, PluginSlug, WorkflowNode
from flowscribe.core.config import NodeTypeVocabulary

_NAMESPACED_ROLE_NAMES: MappingProxyType[NodeKind, str] = MappingProxyType(
    {
        NodeKind.START: "StartNode",
        NodeKind.END: "EndNode",
        NodeKind.BRANCH: "BranchNode",
        NodeKind.NESTED: "NestedNode",
        NodeKind.MULTIPLEXER: "MultiplexerNode",
        NodeKind.DEMULTIPLEXER: "DemultiplexerNode",
    }
)


def is_structural_kind(kind: NodeKind) -> bool:
    """Structural nodes shape topology and never emit code."""
    return kind in STRUCTURAL_KINDS


def is_plugin_kind(kind: NodeKind) -> bool:
    return kind == NodeKind.PLUGIN


@dataclass(frozen=True, slots=True)
class ClassifiedNode:
    """A workflow node paired with its kind.

    ``slug`` is set for plugin nodes only: the explicit plugin id when the
    node carries one, otherwise its type tag.
    """

    node: WorkflowNode
    kind: NodeKind
    slug: PluginSlug | None = None

    @property
    def node_id(self) -> str:
        return self.node.id


class NodeClassifier:
    """Maps type tags to NodeKind according to a vocabulary."""

    def __init__(self, vocabulary: NodeTypeVocabulary | None = None) -> None:
        vocabulary = vocabulary or NodeTypeVocabulary()
        markers: dict[NodeKind, tuple[str, ...]] = {
            NodeKind.START: vocabulary.start,
            NodeKind.END: vocabulary.end,
            NodeKind.BRANCH: vocabulary.branch,
            NodeKind.NESTED: vocabulary.nested,
            NodeKind.MULTIPLEXER: vocabulary.multiplexer,
            NodeKind.DEMULTIPLEXER: vocabulary.demultiplexer,
        }
        table: dict[str, NodeKind] = {}
        for kind, tags in markers.items():
            for tag in tags:
                if tag in table and table[tag] != kind:
                    raise ValueError(f"Type tag '{tag}' is assigned to both {table[tag]} and {kind}")
                table[tag] = kind
            if vocabulary.reserved_namespace is not None:
                table.setdefault(f"{vocabulary.reserved_namespace}/{_NAMESPACED_ROLE_NAMES[kind]}", kind)
        self._table = MappingProxyType(table)

    def kind_of(self, type_tag: str | None) -> NodeKind:
        """Kind denoted by a bare type tag (no plugin id context)."""
        if type_tag is None:
            return NodeKind.UNTYPED
        return self._table.get(type_tag, NodeKind.PLUGIN)

    def is_structural(self, type_tag: str | None) -> bool:
        return is_structural_kind(self.kind_of(type_tag))

    def is_plugin(self, type_tag: str | None) -> bool:
        return is_plugin_kind(self.kind_of(type_tag))

    def classify(self, node: WorkflowNode) -> ClassifiedNode:
        kind = self.kind_of(node.type)
        if kind == NodeKind.UNTYPED and node.data.plugin_id:
            kind = NodeKind.PLUGIN
        if kind != NodeKind.PLUGIN:
            return ClassifiedNode(node=node, kind=kind)
        slug = node.data.plugin_id or node.type
        # kind_of() only returns PLUGIN for a non-None tag or an explicit plugin id
        assert slug is not None
        return ClassifiedNode(node=node, kind=kind, slug=PluginSlug(slug))
