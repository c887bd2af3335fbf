"""Derived read-only views produced during one generation call.

None of these outlive the call that created them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flowscribe.contracts.types import ArtifactID, NodeID, RoutePath
from flowscribe.contracts.workflow import ImportDecl


@dataclass(frozen=True, slots=True)
class Route:
    """A scope of the workflow graph: the root canvas or one nested body.

    ``nested_node_id`` is the last path segment and names the Nested node in
    ``parent_path`` that this route expands. Both are None for the root.
    """

    path: RoutePath
    parent_path: RoutePath | None
    nested_node_id: NodeID | None
    start_nodes: tuple[NodeID, ...]
    end_nodes: tuple[NodeID, ...]
    node_ids: tuple[NodeID, ...]

    @property
    def is_root(self) -> bool:
        return self.parent_path is None


@dataclass(frozen=True, slots=True)
class Path:
    """An ordered walk from a start node to an end node of ``route``.

    No node id repeats within one path.
    """

    end_node_id: NodeID
    nodes: tuple[NodeID, ...]
    route: RoutePath

    def __post_init__(self) -> None:
        if not self.nodes:
            raise ValueError("Path must contain at least one node")
        if self.nodes[-1] != self.end_node_id:
            raise ValueError(f"Path must end at its end node: {self.nodes[-1]!r} != {self.end_node_id!r}")


@dataclass(frozen=True, slots=True)
class PluginResult:
    """Output of one plugin-bearing node, produced at most once per call.

    ``error`` is set for thrown engine errors and for soft errors (code that
    starts with an error sentinel); ``code`` is kept in both cases so the
    artifact stays inspectable.
    """

    node_id: NodeID
    code: str
    imports: tuple[ImportDecl, ...] = ()
    error: str | None = None


@dataclass(frozen=True, slots=True)
class ChildInvocation:
    """One executed sequence child, as handed to the parent plugin."""

    slug: str
    code: str
    settings: dict[str, Any] | None = None
    node_id: str | None = None
    label_name: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"slug": self.slug, "code": self.code}
        if self.settings is not None:
            payload["settings"] = self.settings
        if self.node_id is not None:
            payload["nodeId"] = self.node_id
        if self.label_name is not None:
            payload["labelName"] = self.label_name
        return payload


@dataclass(frozen=True, slots=True)
class AssembledArtifact:
    """One generated code unit and the path it was built from."""

    artifact_id: ArtifactID
    code: str
    path: Path


@dataclass(slots=True)
class TranspilerResult:
    """Outcome of generate_code().

    Error maps are None (and omitted from the wire form) when nothing failed.
    """

    artifacts: dict[str, str] = field(default_factory=dict)
    paths: dict[str, list[str]] = field(default_factory=dict)
    errors_by_node_id: dict[str, str] | None = None
    errors_by_artifact_id: dict[str, dict[str, str]] | None = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors_by_node_id)

    def to_dict(self) -> dict[str, Any]:
        """Wire form with camelCase keys; absent error maps are left out."""
        body: dict[str, Any] = {"artifacts": dict(self.artifacts), "paths": {k: list(v) for k, v in self.paths.items()}}
        if self.errors_by_node_id is not None:
            body["errorsByNodeId"] = dict(self.errors_by_node_id)
        if self.errors_by_artifact_id is not None:
            body["errorsByArtifactId"] = {k: dict(v) for k, v in self.errors_by_artifact_id.items()}
        return body
