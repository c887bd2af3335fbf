"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes live in flowscribe.core.config.

Import patterns:
    from flowscribe.contracts import NodeKind, WorkflowNode, Path
    from flowscribe.core.config import FlowscribeSettings, TranspilerConfig
"""

from flowscribe.contracts.engine import (
    DEFAULT_INTERFACE_NAME,
    EmitsConfig,
    ExecutionResult,
    FrontendConfigs,
    PluginManifest,
)
from flowscribe.contracts.enums import STRUCTURAL_KINDS, HandleName, NodeKind, StorageBackend
from flowscribe.contracts.errors import (
    EngineConfigurationError,
    EngineError,
    FlowscribeError,
    PluginExecutionError,
    PluginNotFoundError,
    WorkflowValidationError,
)
from flowscribe.contracts.results import (
    AssembledArtifact,
    ChildInvocation,
    Path,
    PluginResult,
    Route,
    TranspilerResult,
)
from flowscribe.contracts.types import ROOT_ROUTE, ArtifactID, NodeID, PluginSlug, RoutePath
from flowscribe.contracts.workflow import ImportDecl, NodeData, SequenceItem, WorkflowEdge, WorkflowNode

__all__ = [
    "DEFAULT_INTERFACE_NAME",
    "ROOT_ROUTE",
    "STRUCTURAL_KINDS",
    "ArtifactID",
    "AssembledArtifact",
    "ChildInvocation",
    "EmitsConfig",
    "EngineConfigurationError",
    "EngineError",
    "ExecutionResult",
    "FlowscribeError",
    "FrontendConfigs",
    "HandleName",
    "ImportDecl",
    "NodeData",
    "NodeID",
    "NodeKind",
    "Path",
    "PluginExecutionError",
    "PluginManifest",
    "PluginNotFoundError",
    "PluginResult",
    "PluginSlug",
    "Route",
    "RoutePath",
    "SequenceItem",
    "StorageBackend",
    "TranspilerResult",
    "WorkflowEdge",
    "WorkflowNode",
    "WorkflowValidationError",
]
