# src/flowscribe/transpiler/__init__.py
"""Plugin execution, artifact assembly and error collection."""

from flowscribe.transpiler.assembler import ArtifactAssembler, artifact_ids, format_code, group_by_end_node
from flowscribe.transpiler.errors import ErrorCollector
from flowscribe.transpiler.executor import GenerationContext, PluginExecutor, find_soft_error, plugin_node_ids
from flowscribe.transpiler.generate import (
    build_graph,
    default_generators,
    find_workflow_paths,
    generate_code,
    generate_code_sync,
)
from flowscribe.transpiler.imports import build_import_header

__all__ = [
    "ArtifactAssembler",
    "ErrorCollector",
    "GenerationContext",
    "PluginExecutor",
    "artifact_ids",
    "build_graph",
    "build_import_header",
    "default_generators",
    "find_soft_error",
    "find_workflow_paths",
    "format_code",
    "generate_code",
    "generate_code_sync",
    "group_by_end_node",
    "plugin_node_ids",
]
