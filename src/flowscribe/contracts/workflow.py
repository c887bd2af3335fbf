"""Boundary models for caller-supplied workflow graphs.

These are Tier-3 inputs: they arrive as JSON from a canvas editor, so they
are validated here and treated as trusted typed data everywhere else.
Wire names are camelCase; Python attributes are snake_case. Unknown keys
are preserved (``extra="allow"``) because in-process generators read
node-specific fields such as ``className`` or ``customImports``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from flowscribe.contracts.types import ROOT_ROUTE


class ImportDecl(BaseModel):
    """One import declaration published by a plugin manifest.

    ``items`` absent means a whole-module import (``import path [as alias]``);
    ``items`` present means named imports (``from path import a, b as c``).
    """

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    path: str
    items: list[str] | None = None
    alias: str | None = None
    as_map: dict[str, str] = Field(default_factory=dict, alias="as")

    @property
    def is_named(self) -> bool:
        """Whether this declaration uses the from-import style."""
        return bool(self.items)


class SequenceItem(BaseModel):
    """Serialized child invocation attached to a composite (sequence) node.

    ``node_id`` points at the live canvas node, which is preferred over the
    serialized copy of slug and settings held here.
    """

    model_config = {"frozen": True, "populate_by_name": True, "extra": "allow"}

    node_id: str | None = Field(default=None, alias="nodeId")
    slug: str | None = None
    plugin_id: str | None = Field(default=None, alias="pluginId")
    type: str | None = None
    name: str | None = None
    plugin_settings: dict[str, Any] | None = Field(default=None, alias="pluginSettings")
    settings: dict[str, Any] | None = None

    @property
    def serialized_slug(self) -> str | None:
        return self.slug or self.plugin_id or self.type


class NodeData(BaseModel):
    """The ``data`` payload of a canvas node."""

    model_config = {"frozen": True, "populate_by_name": True, "extra": "allow"}

    label: str = ""
    plugin_id: str | None = Field(default=None, alias="pluginId")
    plugin_settings: dict[str, Any] | None = Field(default=None, alias="pluginSettings")
    sequence_items: list[SequenceItem] | None = Field(default=None, alias="sequenceItems")

    def extra_fields(self) -> dict[str, Any]:
        """Node-specific keys not modelled above, with their wire names."""
        return dict(self.model_extra or {})


class WorkflowNode(BaseModel):
    """A node on the canvas."""

    model_config = {"frozen": True, "populate_by_name": True, "extra": "allow"}

    id: str = Field(min_length=1)
    type: str | None = None
    route: str = ROOT_ROUTE
    data: NodeData = Field(default_factory=NodeData)

    @field_validator("route", mode="before")
    @classmethod
    def default_route(cls, v: Any) -> Any:
        """Nodes without a route live on the root canvas."""
        if v is None or v == "":
            return ROOT_ROUTE
        return v

    @field_validator("type", mode="before")
    @classmethod
    def blank_type_is_none(cls, v: Any) -> Any:
        if v == "":
            return None
        return v


class WorkflowEdge(BaseModel):
    """A directed connection between two canvas nodes.

    Handles encode port semantics ("next"/"prev", "next-<N>" on branch
    outputs, "nested-input"/"nested-output" on nested placeholders).
    Empty handle strings are normalized to None.
    """

    model_config = {"frozen": True, "populate_by_name": True, "extra": "allow"}

    id: str
    source: str
    target: str
    source_handle: str | None = Field(default=None, alias="sourceHandle")
    target_handle: str | None = Field(default=None, alias="targetHandle")

    @field_validator("source_handle", "target_handle", mode="before")
    @classmethod
    def blank_handle_is_none(cls, v: Any) -> Any:
        if v == "":
            return None
        return v
