"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different string values.
"""

from typing import NewType

NodeID = NewType("NodeID", str)
"""Canvas node identifier as supplied by the caller (e.g., 'node-3f2a')"""

RoutePath = NewType("RoutePath", str)
"""Slash-delimited scope path: '/', '/nestedA', '/nestedA/nestedB'"""

ArtifactID = NewType("ArtifactID", str)
"""End node id, or '<end>_path<N>' when several paths share an end node"""

PluginSlug = NewType("PluginSlug", str)
"""Identifier the execution engine resolves to a code generator"""

ROOT_ROUTE = RoutePath("/")
